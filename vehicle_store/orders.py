import logging
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from vehicle_store import repository
from vehicle_store.context import Principal
from vehicle_store.errors import InsufficientStockError, NotFoundError, ValidationError
from vehicle_store.mapping import to_order_response, to_page
from vehicle_store.models import Order, OrderItem, OrderStatus, utcnow
from vehicle_store.schemas import CreateOrderRequest, OrderResponse, Page, PageRequest

logger = logging.getLogger(__name__)

ORDER_SORT_KEYS = {
    "createdAt": lambda order: (order.created_at, order.id),
    "totalAmount": lambda order: (order.total_amount, order.id),
    "status": lambda order: (order.status.value, order.id),
    "id": lambda order: order.id,
}


def validate_order_request(request: CreateOrderRequest):
    if not request.shipping_address or not request.shipping_address.strip():
        raise ValidationError("Shipping address is required")
    if not request.items:
        raise ValidationError("Order must contain at least one item")
    for item in request.items:
        if item.quantity is None or item.quantity < 1:
            raise ValidationError("Quantity must be at least 1")


class OrderService:
    def create_order(self, db: Session, principal: Principal, request: CreateOrderRequest) -> OrderResponse:
        """Place an order for ``principal``.

        Stock decrements, the order row and its line items are committed
        together; any failure rolls all of them back.
        """
        validate_order_request(request)
        try:
            response = self._place_order(db, principal, request)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info("Order %s placed by %s, total %s", response.id, principal.email, response.total_amount)
        return response

    def _place_order(self, db: Session, principal: Principal, request: CreateOrderRequest) -> OrderResponse:
        user = repository.get_user(db, principal.id)
        if user is None:
            raise NotFoundError("User not found")

        lines = []
        total_amount = Decimal("0")
        for requested in request.items:
            vehicle = repository.get_vehicle(db, requested.vehicle_id)
            if vehicle is None:
                raise NotFoundError(f"Vehicle not found with id: {requested.vehicle_id}")
            if vehicle.quantity_available < requested.quantity:
                logger.warning("Insufficient stock for vehicle %s: %s < %s", vehicle.id, vehicle.quantity_available, requested.quantity)
                raise InsufficientStockError(vehicle.id, vehicle.quantity_available, requested.quantity)
            if not repository.decrement_stock(db, vehicle.id, requested.quantity):
                # another order took the stock between the read and the update
                db.refresh(vehicle)
                raise InsufficientStockError(vehicle.id, vehicle.quantity_available, requested.quantity)
            db.refresh(vehicle)

            price_per_unit = vehicle.price
            line_total = price_per_unit * requested.quantity
            lines.append((vehicle, requested.quantity, price_per_unit, line_total))
            total_amount += line_total

        order = Order(
            user_id=user.id,
            shipping_address=request.shipping_address,
            total_amount=total_amount,
            status=OrderStatus.PENDING,
            created_at=utcnow(),
        )
        repository.add_order(db, order)

        items: List[OrderItem] = []
        for vehicle, quantity, price_per_unit, line_total in lines:
            item = OrderItem(
                order_id=order.id,
                vehicle_id=vehicle.id,
                quantity=quantity,
                price_per_unit=price_per_unit,
                total_price=line_total,
            )
            item.vehicle = vehicle
            items.append(repository.add_order_item(db, item))
        db.flush()
        return to_order_response(order, items, user.email)

    def list_orders(self, db: Session, principal: Principal, page_request: PageRequest) -> Page[OrderResponse]:
        sort_key = ORDER_SORT_KEYS.get(page_request.sort_by)
        if sort_key is None:
            raise ValidationError(f"Invalid sort field: {page_request.sort_by}")
        # per-user history is small enough to sort and page in memory
        orders = repository.find_orders_with_items(db, principal.id)
        orders.sort(key=sort_key, reverse=page_request.descending)
        window = orders[page_request.offset:page_request.offset + page_request.size]
        return to_page(
            window,
            len(orders),
            page_request,
            lambda order: to_order_response(order, order.items, order.user.email),
        )
