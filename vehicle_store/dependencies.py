from fastapi import Depends, Request

from vehicle_store.accounts import AccountService
from vehicle_store.catalog import CatalogService
from vehicle_store.context import ANONYMOUS, Principal, RequestContext
from vehicle_store.errors import AuthenticationError
from vehicle_store.orders import OrderService


def get_request_context(request: Request) -> RequestContext:
    return getattr(request.state, "context", ANONYMOUS)


def require_principal(context: RequestContext = Depends(get_request_context)) -> Principal:
    if not context.is_authenticated:
        raise AuthenticationError("Authentication required")
    return context.principal


def get_account_service(request: Request) -> AccountService:
    return request.app.state.accounts


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog


def get_order_service(request: Request) -> OrderService:
    return request.app.state.orders
