"""
Key/value storage backends for persisted client state.

The cart snapshot, recently viewed products and user preferences are each a
single JSON string stored under one key. Backends only need get/set/remove;
they raise on I/O problems and leave absorbing failures to the callers.

Backends:
- MemoryStorage: process-local dict (tests, ephemeral sessions)
- FileStorage: one file per key in a directory
- RedisStorage: Upstash Redis over REST
"""

import json
from pathlib import Path
from typing import Any, Protocol

from upstash_redis import Redis

from storefront.config import Settings
from storefront.errors import ERROR_REDIS_NOT_CONFIGURED
from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)


class KeyValueStorage(Protocol):
    """Minimal string key/value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    """In-process storage; contents are lost when the process exits."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileStorage:
    """
    Stores each key as <directory>/<key>.json.

    The directory is created on first write, not at construction, so an
    unwritable location only fails the individual save.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = key.replace("/", "_").replace("\\", "_")
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # Write-then-rename so a crash never leaves a half-written snapshot
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)

    def remove(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


class RedisStorage:
    """
    Upstash Redis storage (sync REST client).

    Keys are namespaced with a prefix so several storefronts can share one
    database.
    """

    PREFIX = "storefront:"

    def __init__(
        self,
        url: str = "",
        token: str = "",
        client: Redis | None = None,
        prefix: str = PREFIX,
    ) -> None:
        if client is None and (not url or not token):
            raise ValueError(ERROR_REDIS_NOT_CONFIGURED)
        self._url = url
        self._token = token
        self._client = client
        self.prefix = prefix

    @property
    def client(self) -> Redis:
        """Get Redis client (lazy initialization)."""
        if self._client is None:
            self._client = Redis(url=self._url, token=self._token)
        return self._client

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> str | None:
        value = self.client.get(self._key(key))
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def set(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove(self, key: str) -> None:
        self.client.delete(self._key(key))


def read_json(storage: KeyValueStorage, key: str) -> Any:
    """
    Read and parse the JSON document under key.

    Fail-open: a missing key, a storage error or unparsable content all
    return None (errors are logged).
    """
    try:
        raw = storage.get(key)
    except Exception as e:
        logger.error("Failed to read storage key %s: %s", sanitize_id_for_logging(key), e)
        return None

    if not raw:
        return None

    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.warning("Corrupted JSON under storage key %s: %s", sanitize_id_for_logging(key), e)
        return None


def write_json(storage: KeyValueStorage, key: str, value: Any) -> bool:
    """
    Serialize value and write it under key.

    Returns:
        True on success, False if serialization or the write failed (logged)
    """
    try:
        storage.set(key, json.dumps(value, ensure_ascii=False))
        return True
    except Exception as e:
        logger.error("Failed to write storage key %s: %s", sanitize_id_for_logging(key), e)
        return False


def remove_key(storage: KeyValueStorage, key: str) -> bool:
    """Remove key from storage (best effort)."""
    try:
        storage.remove(key)
        return True
    except Exception as e:
        logger.error("Failed to remove storage key %s: %s", sanitize_id_for_logging(key), e)
        return False


def build_storage(settings: Settings) -> KeyValueStorage:
    """
    Create the storage backend selected by settings.

    Raises:
        ValueError: If redis is selected without credentials
    """
    if settings.storage_backend == "file":
        logger.info("Using file storage in %s", settings.storage_dir)
        return FileStorage(settings.storage_dir)
    if settings.storage_backend == "redis":
        logger.info("Using Upstash Redis storage")
        return RedisStorage(url=settings.redis_url, token=settings.redis_token)
    return MemoryStorage()
