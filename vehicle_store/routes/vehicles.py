from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from vehicle_store.catalog import CatalogService, parse_fuel_type, parse_vehicle_type
from vehicle_store.database import get_db
from vehicle_store.dependencies import get_catalog_service
from vehicle_store.schemas import Page, PageRequest, VehicleFilters, VehicleResponse

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


@router.get("", response_model=Page[VehicleResponse], summary="Search the vehicle catalog")
def list_vehicles(
    name: Optional[str] = None,
    brand: Optional[str] = None,
    model: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice"),
    vehicle_type: Optional[str] = Query(None, alias="type"),
    fuel_type: Optional[str] = Query(None, alias="fuelType"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1),
    sort_by: str = Query("id", alias="sortBy"),
    sort_dir: str = Query("asc", alias="sortDir"),
    db: Session = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
):
    filters = VehicleFilters(
        name=name,
        brand=brand,
        model=model,
        min_price=min_price,
        max_price=max_price,
        type=parse_vehicle_type(vehicle_type),
        fuel_type=parse_fuel_type(fuel_type),
    )
    page_request = PageRequest(page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return catalog.search(db, filters, page_request)


@router.get("/{vehicle_id}", response_model=VehicleResponse, summary="Get a single vehicle")
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db), catalog: CatalogService = Depends(get_catalog_service)):
    return catalog.get_vehicle(db, vehicle_id)
