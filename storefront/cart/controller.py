"""Async cart facade for the presentation layer."""
import asyncio
from typing import Any, Callable, Optional

from storefront.catalog.models import ProductId
from .models import CartLine, CartTotals
from .store import CartStore, ProductInput

# Simulated latency after each mutation, in seconds
OPERATION_DELAYS: dict[str, float] = {
    "add": 0.3,
    "remove": 0.2,
    "update": 0.2,
    "clear": 0.3,
}


class CartController:
    """
    Wraps CartStore mutations with a busy indicator for the UI.

    Each operation applies the store mutation immediately, then waits a short
    simulated latency before reporting completion. The indicator counts
    in-flight operations, so is_busy stays True until the last of several
    overlapping calls has finished. The cart data itself is already
    committed when the wait starts.
    """

    def __init__(self, store: CartStore, delays: Optional[dict[str, float]] = None):
        self.store = store
        self._delays = {**OPERATION_DELAYS, **(delays or {})}
        self._in_flight = 0

    @property
    def is_busy(self) -> bool:
        return self._in_flight > 0

    @property
    def pending_operations(self) -> int:
        return self._in_flight

    async def _run(self, operation: str, mutate: Callable[..., None], *args: Any) -> None:
        self._in_flight += 1
        try:
            mutate(*args)
            await asyncio.sleep(self._delays[operation])
        finally:
            self._in_flight -= 1

    # ==================== OPERATIONS ====================

    async def add_to_cart(self, product: ProductInput, quantity: int = 1) -> None:
        await self._run("add", self.store.add_item, product, quantity)

    async def remove_from_cart(self, product_id: ProductId) -> None:
        await self._run("remove", self.store.remove_item, product_id)

    async def update_item_quantity(self, product_id: ProductId, quantity: int) -> None:
        await self._run("update", self.store.update_quantity, product_id, quantity)

    async def clear_all_items(self) -> None:
        await self._run("clear", self.store.clear_cart)

    # ==================== VIEW STATE ====================

    @property
    def items(self) -> tuple[CartLine, ...]:
        return self.store.items

    @property
    def totals(self) -> CartTotals:
        return self.store.compute_totals()

    @property
    def item_count(self) -> int:
        return self.store.item_count

    @property
    def is_empty(self) -> bool:
        return self.store.is_empty

    def is_in_cart(self, product_id: ProductId) -> bool:
        return self.store.is_in_cart(product_id)

    def quantity_of(self, product_id: ProductId) -> int:
        return self.store.quantity_of(product_id)
