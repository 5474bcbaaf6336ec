"""Catalog package: product models, TTL cache, HTTP client and cached service."""
from .models import Product, ProductRating
from .cache import CatalogCache, CacheEntry
from .client import CatalogClient
from .service import CachedCatalog, build_catalog

__all__ = [
    "Product",
    "ProductRating",
    "CatalogCache",
    "CacheEntry",
    "CatalogClient",
    "CachedCatalog",
    "build_catalog",
]
