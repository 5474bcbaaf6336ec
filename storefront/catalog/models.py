"""Catalog models - Pydantic schemas for catalog payloads."""
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

ProductId = Union[int, str]


def parse_price(v):
    """
    Before-validator for prices.

    Floats go through their shortest repr (19.99, not 19.989999...). Anything
    else is left to pydantic's Decimal parsing, so "abc", NaN and booleans fail.
    """
    if isinstance(v, bool):
        raise ValueError("price must be a number")
    if isinstance(v, float):
        return Decimal(str(v))
    return v


def same_product_id(a: ProductId, b: ProductId) -> bool:
    """Ids match on type and value; 1, "1" and True are three different ids."""
    return type(a) is type(b) and a == b


class ProductRating(BaseModel):
    """Aggregate review rating."""
    model_config = ConfigDict(extra="ignore")

    rate: float = 0.0
    count: int = 0


class Product(BaseModel):
    """Product as returned by the catalog service."""
    model_config = ConfigDict(extra="ignore")  # Ignore fields the storefront does not use

    id: ProductId
    title: str = ""
    price: Decimal
    description: str = ""
    category: str = ""
    image: str = ""
    rating: Optional[ProductRating] = None

    @field_validator("price", mode="before")
    @classmethod
    def convert_to_decimal(cls, v):
        return parse_price(v)
