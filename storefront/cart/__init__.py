"""Cart package: models, persistence, store and async controller."""
from .models import CartLine, CartTotals, compute_totals, MAX_QUANTITY
from .persistence import CartPersistence
from .store import CartStore, build_cart_store
from .controller import CartController

__all__ = [
    "CartLine",
    "CartTotals",
    "compute_totals",
    "MAX_QUANTITY",
    "CartPersistence",
    "CartStore",
    "build_cart_store",
    "CartController",
]
