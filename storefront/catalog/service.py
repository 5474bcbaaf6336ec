"""
Cached Catalog Service

Read-through access to the catalog: each lookup is served from CatalogCache
while fresh and fetched through CatalogClient otherwise. Payloads are parsed
into Product models before they are cached, so a payload that fails
validation is never cached either.
"""

from typing import Any, List, Optional

from storefront.config import Settings, get_settings
from storefront.logging import get_logger
from .cache import CatalogCache
from .client import CatalogClient
from .models import Product, ProductId

logger = get_logger(__name__)


def _parse_products(payload: Any) -> List[Product]:
    if not isinstance(payload, list):
        raise ValueError("Expected a list of products")
    return [Product.model_validate(item) for item in payload]


class CachedCatalog:
    """Catalog lookups backed by a TTL cache."""

    def __init__(self, client: CatalogClient, cache: CatalogCache):
        self.client = client
        self.cache = cache

    async def get_products(self) -> List[Product]:
        async def load() -> List[Product]:
            return _parse_products(await self.client.get_products())

        return await self.cache.fetch_through("products", load)

    async def get_product(self, product_id: ProductId) -> Product:
        async def load() -> Product:
            return Product.model_validate(await self.client.get_product(product_id))

        return await self.cache.fetch_through(f"product_{product_id}", load)

    async def get_categories(self) -> List[str]:
        async def load() -> List[str]:
            payload = await self.client.get_categories()
            if not isinstance(payload, list):
                raise ValueError("Expected a list of categories")
            return [str(category) for category in payload]

        return await self.cache.fetch_through("categories", load)

    async def get_products_by_category(self, category: str) -> List[Product]:
        async def load() -> List[Product]:
            return _parse_products(await self.client.get_products_by_category(category))

        return await self.cache.fetch_through(f"category_{category}", load)

    async def get_limited_products(self, limit: int = 20) -> List[Product]:
        """First `limit` products. Not cached: used for paging previews."""
        return _parse_products(await self.client.get_limited_products(limit))


def build_catalog(
    settings: Optional[Settings] = None,
    single_flight: bool = False,
) -> CachedCatalog:
    """Create a CachedCatalog from settings."""
    settings = settings or get_settings()
    client = CatalogClient(base_url=settings.api_url, timeout=settings.http_timeout)
    cache = CatalogCache(default_ttl=settings.cache_ttl, single_flight=single_flight)
    logger.info("Catalog configured for %s (ttl=%ss)", settings.api_url, settings.cache_ttl)
    return CachedCatalog(client, cache)
