"""
Entity Models

Pydantic models for the five source relations. Every input row passes through
one of these models when a snapshot is built, so type errors surface at load
time instead of inside a report.
"""

from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CENT = Decimal("0.01")


class OrderStatus(str, Enum):
    """Order status enumeration"""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RETURNED = "returned"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _coerce_date(value: Any) -> Any:
    """Accept ISO dates and datetimes, keeping only the calendar date"""
    value = _blank_to_none(value)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return datetime.fromisoformat(value.strip()).date()
    return value


def to_cents(amount: Decimal) -> int:
    """Convert a currency amount to integer cents, rounding half-up"""
    return int(amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100)


class Entity(BaseModel):
    """Base for source rows: strips strings, ignores unknown columns"""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class Customer(Entity):
    customer_id: int
    customer_name: str
    gender: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)
    city: Optional[str] = None
    country: Optional[str] = None
    signup_date: Optional[date] = None

    @field_validator("gender", "age", "city", "country", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("signup_date", mode="before")
    @classmethod
    def parse_signup_date(cls, v: Any) -> Any:
        return _coerce_date(v)


class Product(Entity):
    product_id: int
    product_name: str
    category: str
    sub_category: Optional[str] = None
    brand: Optional[str] = None
    price: Decimal = Field(ge=0)
    cost: Decimal = Field(ge=0)

    @field_validator("sub_category", "brand", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)


class Order(Entity):
    order_id: int
    customer_id: int
    order_date: date
    order_status: OrderStatus
    payment_mode: Optional[str] = None

    @field_validator("payment_mode", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("order_date", mode="before")
    @classmethod
    def parse_order_date(cls, v: Any) -> Any:
        return _coerce_date(v)

    @field_validator("order_status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> Any:
        """Statuses are matched case-insensitively"""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class OrderItem(Entity):
    # Assigned sequentially by the snapshot when the source has no id column
    order_item_id: Optional[int] = None
    order_id: int
    product_id: int
    quantity: int = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    final_price: Decimal = Field(ge=0)

    @field_validator("order_item_id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("discount", mode="before")
    @classmethod
    def default_discount(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        return Decimal("0") if v is None else v


class WebSession(Entity):
    session_id: int
    customer_id: int
    device_type: Optional[str] = None
    traffic_source: str
    session_start: Optional[datetime] = None
    pages_viewed: int = Field(default=0, ge=0)
    time_spent: float = Field(default=0.0, ge=0)
    purchase_made: str

    @field_validator("device_type", "session_start", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("purchase_made")
    @classmethod
    def validate_purchase_flag(cls, v: str) -> str:
        """Stored verbatim; only the yes/no value is checked"""
        if v.lower() not in ("yes", "no"):
            raise ValueError(f"purchase_made must be yes or no, got {v!r}")
        return v

    @property
    def converted(self) -> bool:
        return self.purchase_made.lower() == "yes"
