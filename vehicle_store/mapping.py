"""Entity -> response shape conversions. No business logic, no session access
beyond attributes that are already loaded."""
import math
from datetime import datetime, timezone
from typing import Callable, List, Sequence

from vehicle_store.models import Order, OrderItem, User, Vehicle
from vehicle_store.schemas import (
    AuthResponse,
    OrderItemResponse,
    OrderResponse,
    Page,
    PageRequest,
    UserProfileResponse,
    VehicleResponse,
)


def to_vehicle_response(vehicle: Vehicle) -> VehicleResponse:
    return VehicleResponse(
        id=vehicle.id,
        name=vehicle.name,
        brand=vehicle.brand,
        model=vehicle.model,
        year=vehicle.year,
        color=vehicle.color,
        price=vehicle.price,
        quantity_available=vehicle.quantity_available,
        description=vehicle.description,
        image_url=vehicle.image_url,
        type=vehicle.type,
        fuel_type=vehicle.fuel_type,
    )


def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo; they were written as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_order_item_response(item: OrderItem) -> OrderItemResponse:
    return OrderItemResponse(
        id=item.id,
        vehicle_id=item.vehicle_id,
        vehicle_name=item.vehicle.name,
        quantity=item.quantity,
        price_per_unit=item.price_per_unit,
        total_price=item.total_price,
    )


def to_order_response(order: Order, items: Sequence[OrderItem], user_email: str) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        user_email=user_email,
        shipping_address=order.shipping_address,
        total_amount=order.total_amount,
        status=order.status,
        created_at=as_utc(order.created_at),
        items=[to_order_item_response(item) for item in items],
    )


def to_user_profile(user: User) -> UserProfileResponse:
    return UserProfileResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


def to_auth_response(user: User, token: str) -> AuthResponse:
    return AuthResponse(
        token=token,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


def to_page(rows: Sequence, total: int, page_request: PageRequest, convert: Callable) -> Page:
    content: List = [convert(row) for row in rows]
    total_pages = math.ceil(total / page_request.size) if total else 0
    return Page(
        content=content,
        page=page_request.page,
        size=page_request.size,
        total_elements=total,
        total_pages=total_pages,
    )
