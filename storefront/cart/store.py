"""Cart store - the authoritative, persisted cart for one shopper session."""
from typing import Any, Mapping, Optional, Union

from storefront.catalog.models import Product, ProductId, same_product_id
from storefront.config import Settings, get_settings
from storefront.logging import get_logger, sanitize_id_for_logging
from storefront.storage import KeyValueStorage, build_storage
from .models import CartLine, CartTotals, MIN_QUANTITY, compute_totals
from .persistence import CartPersistence

logger = get_logger(__name__)

ProductInput = Union[Product, Mapping[str, Any]]


class CartStore:
    """
    Owns the cart lines and writes them through to persistence.

    Features:
    - Lines unique by product id, kept in insertion order
    - Quantities always within [1, 10]; out-of-range input is clamped
    - Prices locked in when a product is first added
    - Totals derived on demand, never stored

    The store is created once per session and passed to its consumers.
    The snapshot is loaded at construction; every mutation rewrites it.
    Mutations never raise for out-of-range quantities or unknown ids.
    Ids match on type as well as value, so 1, "1" and True are distinct.
    """

    def __init__(self, persistence: CartPersistence):
        self._persistence = persistence
        self._lines: list[CartLine] = persistence.load()
        logger.debug("Cart loaded with %d lines", len(self._lines))

    # ==================== QUERIES ====================

    @property
    def items(self) -> tuple[CartLine, ...]:
        """Current lines in insertion order."""
        return tuple(self._lines)

    @property
    def item_count(self) -> int:
        """Total number of units across all lines."""
        return sum(line.quantity for line in self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def is_in_cart(self, product_id: ProductId) -> bool:
        return self._find(product_id) is not None

    def quantity_of(self, product_id: ProductId) -> int:
        index = self._find(product_id)
        return self._lines[index].quantity if index is not None else 0

    def compute_totals(self) -> CartTotals:
        return compute_totals(self._lines)

    # ==================== MUTATIONS ====================

    def add_item(self, product: ProductInput, quantity: int = 1) -> None:
        """
        Add a product, merging with an existing line.

        Args:
            product: Catalog product (or a mapping with its fields)
            quantity: Units to add; values below 1 count as 1, the line is capped at 10

        Raises:
            pydantic.ValidationError: If a mapping has no id or a non-numeric price
        """
        if not isinstance(product, Product):
            product = Product.model_validate(product)
        quantity = max(int(quantity), MIN_QUANTITY)

        index = self._find(product.id)
        if index is not None:
            existing = self._lines[index]
            self._lines[index] = existing.with_quantity(existing.quantity + quantity)
        else:
            self._lines.append(CartLine.from_product(product, quantity))

        logger.debug(
            "Added %d x %s (now %d)",
            quantity,
            sanitize_id_for_logging(product.id),
            self.quantity_of(product.id),
        )
        self._persist()

    def remove_item(self, product_id: ProductId) -> None:
        """Remove a line; unknown ids are ignored."""
        self._lines = [
            line for line in self._lines if not same_product_id(line.product_id, product_id)
        ]
        self._persist()

    def update_quantity(self, product_id: ProductId, quantity: int) -> None:
        """
        Set a line's quantity.

        quantity <= 0 removes the line. Unknown ids are ignored.
        """
        if quantity <= 0:
            self.remove_item(product_id)
            return

        index = self._find(product_id)
        if index is not None:
            self._lines[index] = self._lines[index].with_quantity(quantity)
        self._persist()

    def clear_cart(self) -> None:
        self._lines = []
        self._persist()

    # ==================== INTERNALS ====================

    def _find(self, product_id: ProductId) -> Optional[int]:
        for index, line in enumerate(self._lines):
            if same_product_id(line.product_id, product_id):
                return index
        return None

    def _persist(self) -> None:
        # Failures are logged inside persistence; the in-memory cart stays authoritative
        self._persistence.save(self._lines)


def build_cart_store(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
) -> CartStore:
    """
    Create a CartStore wired to the configured storage backend.

    Args:
        settings: Settings to use (read from the environment when omitted)
        storage: Explicit storage backend, overrides settings.storage_backend
    """
    settings = settings or get_settings()
    storage = storage if storage is not None else build_storage(settings)
    return CartStore(CartPersistence(storage, key=settings.cart_storage_key))
