from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vehicle_store.context import Principal
from vehicle_store.database import get_db
from vehicle_store.dependencies import get_order_service, require_principal
from vehicle_store.orders import OrderService
from vehicle_store.schemas import CreateOrderRequest, OrderResponse, Page, PageRequest

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("", response_model=OrderResponse, summary="Place an order")
def create_order(
    request: CreateOrderRequest,
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    return orders.create_order(db, principal, request)


@router.get("", response_model=Page[OrderResponse], summary="List the caller's orders")
def list_orders(
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1),
    sort_by: str = Query("createdAt", alias="sortBy"),
    sort_dir: str = Query("desc", alias="sortDir"),
    principal: Principal = Depends(require_principal),
    db: Session = Depends(get_db),
    orders: OrderService = Depends(get_order_service),
):
    page_request = PageRequest(page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return orders.list_orders(db, principal, page_request)
