"""Explicit query helpers over the SQLAlchemy session.

Services call these instead of relying on lazy relationships or cascades.
None of them commit: the caller owns the transaction.
"""
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session, selectinload

from vehicle_store.models import Order, OrderItem, User, Vehicle


# Users

def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == email).first()


def email_exists(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def add_user(db: Session, user: User) -> User:
    db.add(user)
    db.flush()
    return user


# Vehicles

def get_vehicle(db: Session, vehicle_id: int) -> Optional[Vehicle]:
    return db.get(Vehicle, vehicle_id)


def search_vehicles(db: Session, predicates: Sequence, order_by, offset: int, limit: int) -> Tuple[List[Vehicle], int]:
    query = db.query(Vehicle).filter(*predicates)
    total = query.count()
    rows = query.order_by(*order_by).offset(offset).limit(limit).all()
    return rows, total


def decrement_stock(db: Session, vehicle_id: int, quantity: int) -> bool:
    """Take ``quantity`` units off the vehicle's stock if that many are left.

    The check and the write are one UPDATE statement, so concurrent orders
    cannot push the stock below zero. Returns False when no row was changed.
    """
    updated = (
        db.query(Vehicle)
        .filter(Vehicle.id == vehicle_id, Vehicle.quantity_available >= quantity)
        .update({Vehicle.quantity_available: Vehicle.quantity_available - quantity}, synchronize_session=False)
    )
    return updated == 1


def count_vehicles(db: Session) -> int:
    return db.query(Vehicle).count()


# Orders

def add_order(db: Session, order: Order) -> Order:
    db.add(order)
    db.flush()
    return order


def add_order_item(db: Session, item: OrderItem) -> OrderItem:
    db.add(item)
    return item


def find_orders_with_items(db: Session, user_id: int) -> List[Order]:
    return (
        db.query(Order)
        .options(selectinload(Order.user), selectinload(Order.items).selectinload(OrderItem.vehicle))
        .filter(Order.user_id == user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def delete_order(db: Session, order: Order):
    for item in db.query(OrderItem).filter(OrderItem.order_id == order.id).all():
        db.delete(item)
    db.flush()
    # reload the now empty collection so the flush below has no children to unlink
    db.expire(order, ["items"])
    db.delete(order)
    db.flush()
