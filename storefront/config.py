"""
Configuration - environment variables with .env support.

All settings are read here; other modules receive a Settings instance
instead of touching os.environ directly.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from storefront.logging import get_logger

logger = get_logger(__name__)

DEFAULT_API_URL = "https://fakestoreapi.com"
DEFAULT_CART_STORAGE_KEY = "cart-storage"
DEFAULT_CACHE_TTL_SECONDS = 300.0  # 5 minutes
DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0

STORAGE_BACKENDS = ("memory", "file", "redis")


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the storefront core."""

    api_url: str = DEFAULT_API_URL
    storage_backend: str = "memory"  # memory | file | redis
    storage_dir: str = "data/storage"
    cart_storage_key: str = DEFAULT_CART_STORAGE_KEY
    cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS
    http_timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS
    redis_url: str = ""
    redis_token: str = ""


def _get_float(key: str, default: float) -> float:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", key, raw, default)
        return default
    if value <= 0:
        logger.warning("Non-positive %s=%r, using default %s", key, raw, default)
        return default
    return value


def get_settings(env_file: str | None = None) -> Settings:
    """
    Build Settings from the environment.

    Loads .env first (existing environment variables win).

    Args:
        env_file: Optional explicit path to a .env file

    Returns:
        Settings instance
    """
    load_dotenv(env_file)

    backend = os.environ.get("STOREFRONT_STORAGE", "memory").strip().lower() or "memory"
    if backend not in STORAGE_BACKENDS:
        logger.warning("Unknown STOREFRONT_STORAGE=%r, falling back to memory", backend)
        backend = "memory"

    return Settings(
        api_url=os.environ.get("STOREFRONT_API_URL", DEFAULT_API_URL).strip().rstrip("/")
        or DEFAULT_API_URL,
        storage_backend=backend,
        storage_dir=os.environ.get("STOREFRONT_STORAGE_DIR", "data/storage").strip() or "data/storage",
        cart_storage_key=os.environ.get("CART_STORAGE_KEY", DEFAULT_CART_STORAGE_KEY).strip()
        or DEFAULT_CART_STORAGE_KEY,
        cache_ttl=_get_float("CATALOG_CACHE_TTL", DEFAULT_CACHE_TTL_SECONDS),
        http_timeout=_get_float("CATALOG_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT_SECONDS),
        redis_url=os.environ.get("UPSTASH_REDIS_REST_URL", "").strip(),
        redis_token=os.environ.get("UPSTASH_REDIS_REST_TOKEN", "").strip(),
    )
