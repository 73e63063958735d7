"""Request and response models for the HTTP API."""

import math
import re
from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CATEGORY = "Other"
# largest value an SQLite INTEGER column accepts
MAX_QUANTITY = 2**63 - 1

_LEADING_INT = re.compile(r"[+-]?\d+")


class ProductFields(BaseModel):
    """Validated fields of a product about to be created."""

    name: str
    description: str = ""
    price: float
    quantity: int = Field(0, ge=0, le=MAX_QUANTITY)
    category: str = DEFAULT_CATEGORY
    image_path: Optional[str] = None


class ProductOut(BaseModel):
    """Serialized product."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    description: Optional[str] = ""
    price: float
    quantity: Optional[int] = 0
    category: Optional[str] = DEFAULT_CATEGORY
    image_path: Optional[str] = Field(None, alias="imagePath")


class ProductCreatedResponse(BaseModel):
    success: bool = True
    product: ProductOut


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User registered successfully"


class LoginResponse(BaseModel):
    success: bool = True
    email: str
    role: str


class StatusResponse(BaseModel):
    """Service summary returned by the root endpoint."""

    message: str
    status: str = "success"
    database: str
    timestamp: datetime


class HealthResponse(BaseModel):
    status: str = "healthy"
    database: str
    timestamp: datetime


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_price(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` if it is not a number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(price):
        return None
    return price


def parse_quantity(value: Any) -> int:
    """Return the leading integer of ``value`` as a stored quantity.

    Values without a leading integer, and negative values, fall back to 0.
    Quantities are capped to what an SQLite INTEGER can hold.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, float):
        quantity = int(value) if math.isfinite(value) else 0
    elif isinstance(value, int):
        quantity = value
    else:
        match = _LEADING_INT.match(_text(value))
        if match is None:
            return 0
        digits = match.group()
        if len(digits.lstrip("+-").lstrip("0")) > len(str(MAX_QUANTITY)):
            # too long for int() and for the column either way
            return 0 if digits.startswith("-") else MAX_QUANTITY
        quantity = int(digits)
    return min(max(quantity, 0), MAX_QUANTITY)


def product_fields_from(data: Mapping[str, Any]) -> Optional[ProductFields]:
    """Build ``ProductFields`` from a raw payload.

    Returns ``None`` when the name is missing or the price is not numeric.
    The image reference is resolved separately.
    """
    name = _text(data.get("name"))
    price = parse_price(data.get("price"))
    if not name or price is None:
        return None
    return ProductFields(
        name=name,
        description=_text(data.get("description")),
        price=price,
        quantity=parse_quantity(data.get("quantity")),
        category=_text(data.get("category")) or DEFAULT_CATEGORY,
    )
