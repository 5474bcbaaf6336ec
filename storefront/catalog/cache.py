"""
Catalog Cache - in-memory TTL read-through cache for catalog payloads.

Entries expire lazily: an expired entry is discarded when it is next read,
there is no background sweep.
"""
import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from storefront.config import DEFAULT_CACHE_TTL_SECONDS
from storefront.logging import get_logger, sanitize_id_for_logging

logger = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]

_MISSING = object()


@dataclass
class CacheEntry:
    """Cached payload with an absolute expiry time (clock seconds)."""
    key: str
    payload: Any
    expires_at: float


class CatalogCache:
    """
    Key -> payload cache with per-entry expiry.

    By default concurrent misses for the same key each run their loader.
    With single_flight=True, callers that miss while a load for that key is
    already running await that load instead of starting another one.

    Args:
        default_ttl: Seconds an entry stays visible (default 5 minutes)
        clock: Monotonic time source in seconds, injectable for tests
        single_flight: Share in-flight loads between concurrent misses
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        single_flight: bool = False,
    ):
        self.default_ttl = default_ttl
        self.single_flight = single_flight
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._in_flight: dict[str, asyncio.Future] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if self._clock() > entry.expires_at:
            del self._entries[key]
            return _MISSING
        return entry.payload

    def get(self, key: str) -> Any:
        """Return the payload for key, or None if absent or expired."""
        payload = self._lookup(key)
        return None if payload is _MISSING else payload

    def set(self, key: str, payload: Any, ttl: Optional[float] = None) -> None:
        """Install or replace the entry for key."""
        ttl = self.default_ttl if ttl is None else ttl
        self._entries[key] = CacheEntry(key=key, payload=payload, expires_at=self._clock() + ttl)

    def clear(self) -> None:
        """Drop every entry. Loads already running will still store their result."""
        self._entries.clear()

    async def fetch_through(self, key: str, loader: Loader) -> Any:
        """
        Return the cached payload for key, loading it on a miss.

        Loader errors propagate unchanged and nothing is cached for them.
        """
        payload = self._lookup(key)
        if payload is not _MISSING:
            logger.debug("Catalog cache hit: %s", sanitize_id_for_logging(key))
            return payload

        logger.debug("Catalog cache miss: %s", sanitize_id_for_logging(key))
        if not self.single_flight:
            return await self._load(key, loader)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._load(key, loader))
            self._in_flight[key] = task
            task.add_done_callback(lambda done, key=key: self._forget(key, done))
        # Shielded so one cancelled caller does not cancel the load for the others
        return await asyncio.shield(task)

    async def _load(self, key: str, loader: Loader) -> Any:
        payload = await loader()
        self.set(key, payload)
        return payload

    def _forget(self, key: str, task: asyncio.Future) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if not task.cancelled():
            # Mark the exception as retrieved when every waiter has gone away
            task.exception()
