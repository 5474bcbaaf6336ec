"""Cart models with Decimal-based pricing."""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storefront.catalog.models import Product, ProductId, parse_price
from storefront.money import format_money, multiply, round_money, to_float, to_json_number

MIN_QUANTITY = 1
MAX_QUANTITY = 10

TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = Decimal("50")  # strictly greater than this ships free
SHIPPING_FEE = Decimal("5.99")


def clamp_quantity(quantity: int) -> int:
    """Clamp a requested quantity into [MIN_QUANTITY, MAX_QUANTITY]."""
    return min(max(int(quantity), MIN_QUANTITY), MAX_QUANTITY)


class CartLine(BaseModel):
    """
    One product in the cart.

    unit_price is captured when the product is added and never re-read from
    the catalog. Field aliases match the persisted snapshot keys
    (id, price), unknown keys are dropped.
    """
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    product_id: ProductId = Field(alias="id")
    title: str = ""
    unit_price: Decimal = Field(alias="price", ge=0)
    image: str = ""
    category: str = ""
    quantity: int = MIN_QUANTITY

    @field_validator("product_id")
    @classmethod
    def non_empty_id(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("product id must not be empty")
        return v

    @field_validator("unit_price", mode="before")
    @classmethod
    def float_via_str(cls, v):
        return parse_price(v)

    @field_validator("quantity")
    @classmethod
    def clamp(cls, v: int) -> int:
        if v < MIN_QUANTITY:
            raise ValueError(f"quantity must be at least {MIN_QUANTITY}")
        return min(v, MAX_QUANTITY)

    @property
    def line_total(self) -> Decimal:
        """Unrounded price for all units on this line."""
        return multiply(self.unit_price, self.quantity)

    def with_quantity(self, quantity: int) -> "CartLine":
        """Copy of this line with a clamped quantity."""
        return self.model_copy(update={"quantity": clamp_quantity(quantity)})

    @classmethod
    def from_product(cls, product: Product, quantity: int) -> "CartLine":
        """Create a line from a catalog product, locking in its current price."""
        return cls(
            product_id=product.id,
            title=product.title,
            unit_price=max(product.price, Decimal("0")),
            image=product.image,
            category=product.category,
            quantity=clamp_quantity(quantity),
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Convert to the persisted snapshot shape.

        price is a JSON number unless that would drop digits, in which case
        it is written as the exact decimal string.
        """
        return {
            "id": self.product_id,
            "title": self.title,
            "price": to_json_number(self.unit_price),
            "image": self.image,
            "category": self.category,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartLine":
        """
        Create from a persisted snapshot entry.

        Raises:
            pydantic.ValidationError: If the entry is malformed
        """
        return cls.model_validate(data)


@dataclass(frozen=True)
class CartTotals:
    """Derived cart figures; every monetary value is rounded to cents."""
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    item_count: int

    @property
    def free_shipping(self) -> bool:
        return self.shipping == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return {
            "subtotal": to_float(self.subtotal),
            "tax": to_float(self.tax),
            "shipping": to_float(self.shipping),
            "total": to_float(self.total),
            "item_count": self.item_count,
        }

    def formatted(self, currency: str = "USD") -> dict[str, str]:
        """Display strings for an order summary; free shipping reads "Free"."""
        return {
            "subtotal": format_money(self.subtotal, currency),
            "tax": format_money(self.tax, currency),
            "shipping": "Free" if self.free_shipping else format_money(self.shipping, currency),
            "total": format_money(self.total, currency),
        }


def compute_totals(lines: Iterable[CartLine]) -> CartTotals:
    """
    Compute totals for a set of lines.

    Tax and shipping are derived from the unrounded subtotal and the total
    is summed before rounding, so the rounded parts may differ from the
    rounded total by a cent.
    """
    lines = list(lines)
    subtotal = sum((line.line_total for line in lines), Decimal("0"))
    tax = subtotal * TAX_RATE
    shipping = Decimal("0") if subtotal > FREE_SHIPPING_THRESHOLD else SHIPPING_FEE
    total = subtotal + tax + shipping

    return CartTotals(
        subtotal=round_money(subtotal),
        tax=round_money(tax),
        shipping=round_money(shipping),
        total=round_money(total),
        item_count=sum(line.quantity for line in lines),
    )
