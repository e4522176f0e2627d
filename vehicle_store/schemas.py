"""
Request and response schemas.

Field names are snake_case in Python and camelCase on the wire
(e.g. shipping_address <-> "shippingAddress").
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from vehicle_store.models import FuelType, OrderStatus, Role, VehicleType

T = TypeVar("T")

# amounts stay Decimal in Python and go out as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(value: str) -> str:
    if not value or not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


# ---------------- Auth ----------------

class SignupRequest(CamelModel):
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(..., min_length=6, description="Plain password, hashed server-side")
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)

    @field_validator("first_name", "last_name")
    @classmethod
    def names_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthResponse(CamelModel):
    token: str
    email: str
    first_name: str
    last_name: str
    role: Role


class UserProfileResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: Role


# ---------------- Vehicles ----------------

class VehicleResponse(CamelModel):
    id: int
    name: str
    brand: str
    model: str
    year: int
    color: str
    price: Money
    quantity_available: int
    description: Optional[str] = None
    image_url: str
    type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None


class VehicleFilters(CamelModel):
    """Catalog filters; every field is optional and unset means unconstrained."""

    name: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    type: Optional[VehicleType] = None
    fuel_type: Optional[FuelType] = None


# ---------------- Orders ----------------

class OrderItemRequest(CamelModel):
    vehicle_id: int = Field(..., description="Vehicle id")
    quantity: int = Field(..., ge=1, description="Quantity must be at least 1")


class CreateOrderRequest(CamelModel):
    shipping_address: str = Field(..., description="Shipping address is required")
    items: List[OrderItemRequest] = Field(..., min_length=1, description="Order must contain at least one item")

    @field_validator("shipping_address")
    @classmethod
    def address_not_blank(cls, value: str) -> str:
        return _not_blank(value)


class OrderItemResponse(CamelModel):
    id: int
    vehicle_id: int
    vehicle_name: str
    quantity: int
    price_per_unit: Money
    total_price: Money


class OrderResponse(CamelModel):
    id: int
    user_email: str
    shipping_address: str
    total_amount: Money
    status: OrderStatus
    created_at: datetime
    items: List[OrderItemResponse]


# ---------------- Paging ----------------

class PageRequest(CamelModel):
    page: int = Field(0, ge=0)
    size: int = Field(10, ge=1)
    sort_by: str = "id"
    sort_dir: str = "asc"

    @property
    def descending(self) -> bool:
        return self.sort_dir.lower() == "desc"

    @property
    def offset(self) -> int:
        return self.page * self.size


class Page(CamelModel, Generic[T]):
    content: List[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
