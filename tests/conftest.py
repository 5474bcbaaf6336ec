"""Pytest configuration and fixtures"""
import os

import pytest

from storefront.cart import CartPersistence, CartStore
from storefront.catalog import Product
from storefront.storage import MemoryStorage

# Keep tests independent of a developer's .env
os.environ.setdefault("STOREFRONT_STORAGE", "memory")


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> MemoryStorage:
    """Fresh in-memory key/value storage"""
    return MemoryStorage()


@pytest.fixture
def persistence(storage) -> CartPersistence:
    return CartPersistence(storage)


@pytest.fixture
def store(persistence) -> CartStore:
    """Empty cart store backed by memory storage"""
    return CartStore(persistence)


@pytest.fixture
def sample_product() -> Product:
    """Sample catalog product"""
    return Product.model_validate({
        "id": 1,
        "title": "Fjallraven Backpack",
        "price": 109.95,
        "description": "Your perfect pack for everyday use",
        "category": "men's clothing",
        "image": "https://fakestoreapi.com/img/81fPKd-2AYL._AC_SL1500_.jpg",
        "rating": {"rate": 3.9, "count": 120},
    })


@pytest.fixture
def sample_products_payload() -> list:
    """Raw /products payload as returned by the catalog API"""
    return [
        {
            "id": 1,
            "title": "Fjallraven Backpack",
            "price": 109.95,
            "description": "Your perfect pack for everyday use",
            "category": "men's clothing",
            "image": "https://fakestoreapi.com/img/1.jpg",
            "rating": {"rate": 3.9, "count": 120},
        },
        {
            "id": 2,
            "title": "Mens Casual Premium Slim Fit T-Shirts",
            "price": 22.3,
            "description": "Slim-fitting style",
            "category": "men's clothing",
            "image": "https://fakestoreapi.com/img/2.jpg",
            "rating": {"rate": 4.1, "count": 259},
        },
    ]


@pytest.fixture
def make_product():
    """Factory for minimal products used in cart tests"""
    def _make(product_id, price, title: str = "", category: str = "misc") -> Product:
        return Product(id=product_id, title=title or f"Product {product_id}", price=price, category=category)
    return _make
