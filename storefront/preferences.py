"""
Persisted shopper preferences: recently viewed products and display settings.

Both documents live in the same key/value storage as the cart and share its
fail-open behaviour: unreadable data falls back to defaults, failed writes
are logged and the in-memory value is kept.
"""

from typing import Any, List

from pydantic import ValidationError

from storefront.catalog.models import Product, same_product_id
from storefront.logging import get_logger
from storefront.money import to_float
from storefront.storage import KeyValueStorage, read_json, write_json

logger = get_logger(__name__)

RECENTLY_VIEWED_KEY = "recentlyViewed"
RECENTLY_VIEWED_LIMIT = 5

USER_PREFERENCES_KEY = "userPreferences"
DEFAULT_PREFERENCES: dict[str, Any] = {
    "theme": "light",
    "currency": "USD",
    "itemsPerPage": 20,
    "defaultView": "grid",  # grid or list
}


class RecentlyViewed:
    """Most-recently-viewed products, newest first, at most 5."""

    def __init__(self, storage: KeyValueStorage, key: str = RECENTLY_VIEWED_KEY):
        self.storage = storage
        self.key = key
        self._products: List[Product] = self._load()

    def _load(self) -> List[Product]:
        data = read_json(self.storage, self.key)
        if not isinstance(data, list):
            return []
        products = []
        for entry in data:
            try:
                products.append(Product.model_validate(entry))
            except ValidationError:
                logger.warning("Dropping malformed recently viewed entry")
        return products[:RECENTLY_VIEWED_LIMIT]

    @property
    def products(self) -> List[Product]:
        return list(self._products)

    def add(self, product: Product) -> None:
        """Move product to the front, dropping the oldest beyond the limit."""
        rest = [p for p in self._products if not same_product_id(p.id, product.id)]
        self._products = [product, *rest][:RECENTLY_VIEWED_LIMIT]
        self._save()

    def clear(self) -> None:
        self._products = []
        self._save()

    def _save(self) -> None:
        write_json(
            self.storage,
            self.key,
            [{**p.model_dump(mode="json"), "price": to_float(p.price)} for p in self._products],
        )


class UserPreferences:
    """Display preferences with defaults; unknown keys are kept as given."""

    def __init__(self, storage: KeyValueStorage, key: str = USER_PREFERENCES_KEY):
        self.storage = storage
        self.key = key
        data = read_json(storage, key)
        self._values: dict[str, Any] = dict(data) if isinstance(data, dict) else dict(DEFAULT_PREFERENCES)

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def update(self, key: str, value: Any) -> None:
        self._values = {**self._values, key: value}
        write_json(self.storage, self.key, self._values)

    def reset(self) -> None:
        self._values = dict(DEFAULT_PREFERENCES)
        write_json(self.storage, self.key, self._values)
