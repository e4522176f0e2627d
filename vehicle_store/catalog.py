import logging
from typing import List, Optional, Type

from sqlalchemy.orm import Session

from vehicle_store import repository
from vehicle_store.errors import NotFoundError, ValidationError
from vehicle_store.mapping import to_page, to_vehicle_response
from vehicle_store.models import FuelType, Vehicle, VehicleType
from vehicle_store.schemas import Page, PageRequest, VehicleFilters, VehicleResponse

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "id": Vehicle.id,
    "name": Vehicle.name,
    "brand": Vehicle.brand,
    "model": Vehicle.model,
    "year": Vehicle.year,
    "color": Vehicle.color,
    "price": Vehicle.price,
    "quantityAvailable": Vehicle.quantity_available,
}


def _parse_enum(enum_cls: Type, value: Optional[str], label: str):
    if value is None or value == "":
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}")


def parse_vehicle_type(value: Optional[str]) -> Optional[VehicleType]:
    return _parse_enum(VehicleType, value, "vehicle type")


def parse_fuel_type(value: Optional[str]) -> Optional[FuelType]:
    return _parse_enum(FuelType, value, "fuel type")


def _contains(column, text: str):
    return column.icontains(text, autoescape=True)


def build_vehicle_predicates(filters: VehicleFilters) -> List:
    """Compose one SQL clause per provided filter; absent filters add nothing."""
    predicates = []
    if filters.name:
        predicates.append(_contains(Vehicle.name, filters.name))
    if filters.brand:
        predicates.append(_contains(Vehicle.brand, filters.brand))
    if filters.model:
        predicates.append(_contains(Vehicle.model, filters.model))
    if filters.min_price is not None:
        predicates.append(Vehicle.price >= filters.min_price)
    if filters.max_price is not None:
        predicates.append(Vehicle.price <= filters.max_price)
    if filters.type is not None:
        predicates.append(Vehicle.type == filters.type)
    if filters.fuel_type is not None:
        predicates.append(Vehicle.fuel_type == filters.fuel_type)
    return predicates


def build_order_by(page_request: PageRequest) -> List:
    column = SORTABLE_FIELDS.get(page_request.sort_by)
    if column is None:
        raise ValidationError(f"Invalid sort field: {page_request.sort_by}")
    primary = column.desc() if page_request.descending else column.asc()
    # stable paging when the sort column has duplicates
    return [primary] if page_request.sort_by == "id" else [primary, Vehicle.id.asc()]


class CatalogService:
    def search(self, db: Session, filters: VehicleFilters, page_request: PageRequest) -> Page[VehicleResponse]:
        predicates = build_vehicle_predicates(filters)
        order_by = build_order_by(page_request)
        logger.debug("Vehicle search with %d filters, page %d", len(predicates), page_request.page)
        rows, total = repository.search_vehicles(db, predicates, order_by, page_request.offset, page_request.size)
        return to_page(rows, total, page_request, to_vehicle_response)

    def get_vehicle(self, db: Session, vehicle_id: int) -> VehicleResponse:
        vehicle = repository.get_vehicle(db, vehicle_id)
        if vehicle is None:
            raise NotFoundError(f"Vehicle not found with id: {vehicle_id}")
        return to_vehicle_response(vehicle)
