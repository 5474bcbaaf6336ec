"""
Tests for the async cart controller
"""

import asyncio
from decimal import Decimal

import pytest

from storefront.cart import CartController
from storefront.cart.controller import OPERATION_DELAYS

FAST_DELAYS = {"add": 0.0, "remove": 0.0, "update": 0.0, "clear": 0.0}


@pytest.fixture
def controller(store) -> CartController:
    return CartController(store, delays=FAST_DELAYS)


def test_default_delays():
    """Test default simulated latencies."""
    assert OPERATION_DELAYS == {"add": 0.3, "remove": 0.2, "update": 0.2, "clear": 0.3}


@pytest.mark.asyncio
async def test_operations_delegate_to_store(controller, make_product):
    """Test each operation applies the matching store mutation."""
    await controller.add_to_cart(make_product("A", 20), 2)
    await controller.add_to_cart(make_product("B", 5))

    assert controller.item_count == 3
    assert controller.totals.total == Decimal("55.49")

    await controller.update_item_quantity("A", 4)
    assert controller.quantity_of("A") == 4

    await controller.remove_from_cart("B")
    assert not controller.is_in_cart("B")

    await controller.clear_all_items()
    assert controller.is_empty
    assert controller.items == ()
    assert controller.is_busy is False


@pytest.mark.asyncio
async def test_mutation_committed_before_delay(store, make_product):
    """Test cart data is updated while the operation is still pending."""
    controller = CartController(store, delays={"add": 0.05})

    task = asyncio.create_task(controller.add_to_cart(make_product("A", 1)))
    await asyncio.sleep(0.01)

    assert controller.is_busy is True
    assert store.is_in_cart("A")

    await task
    assert controller.is_busy is False


@pytest.mark.asyncio
async def test_busy_until_last_overlapping_call(store, make_product):
    """Test an early finisher does not clear busy for a slower call."""
    controller = CartController(store, delays={"add": 0.15, "remove": 0.02})
    store.add_item(make_product("B", 1))

    slow = asyncio.create_task(controller.add_to_cart(make_product("A", 1)))
    fast = asyncio.create_task(controller.remove_from_cart("B"))
    await asyncio.sleep(0)
    assert controller.pending_operations == 2

    await fast
    assert controller.is_busy is True
    assert controller.pending_operations == 1

    await slow
    assert controller.is_busy is False


@pytest.mark.asyncio
async def test_busy_cleared_on_cancellation(store, make_product):
    controller = CartController(store, delays={"clear": 10})
    store.add_item(make_product("A", 1))

    task = asyncio.create_task(controller.clear_all_items())
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.is_busy is False
    assert store.is_empty


@pytest.mark.asyncio
async def test_busy_cleared_when_mutation_fails(controller):
    """Test a product that fails validation does not leave busy set."""
    with pytest.raises(Exception):
        await controller.add_to_cart({"title": "missing id and price"})

    assert controller.is_busy is False
