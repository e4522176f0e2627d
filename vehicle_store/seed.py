import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from vehicle_store import repository
from vehicle_store.models import FuelType, Vehicle, VehicleType

logger = logging.getLogger(__name__)

SAMPLE_VEHICLES = [
    {
        "name": "Tesla Model 3",
        "brand": "Tesla",
        "model": "Model 3",
        "year": 2023,
        "color": "Pearl White",
        "price": Decimal("42990.00"),
        "quantity_available": 5,
        "description": "Electric four-door sedan with autopilot capabilities and over-the-air software updates.",
        "image_url": "https://images.unsplash.com/photo-1560958089-b8a1929cea89",
        "type": VehicleType.SEDAN,
        "fuel_type": FuelType.ELECTRIC,
    },
    {
        "name": "Toyota RAV4 Hybrid",
        "brand": "Toyota",
        "model": "RAV4",
        "year": 2023,
        "color": "Blueprint",
        "price": Decimal("31575.00"),
        "quantity_available": 8,
        "description": "Compact crossover SUV with excellent fuel economy and reliability.",
        "image_url": "https://images.unsplash.com/photo-1581540222194-0def2dda95b8",
        "type": VehicleType.SUV,
        "fuel_type": FuelType.HYBRID,
    },
    {
        "name": "Ford Mustang GT",
        "brand": "Ford",
        "model": "Mustang",
        "year": 2022,
        "color": "Race Red",
        "price": Decimal("39720.00"),
        "quantity_available": 3,
        "description": "V8 sports coupe.",
        "image_url": "https://images.unsplash.com/photo-1584345604476-8ec5e12e42dd",
        "type": VehicleType.COUPE,
        "fuel_type": FuelType.PETROL,
    },
    {
        "name": "Ford F-150 Lightning",
        "brand": "Ford",
        "model": "F-150",
        "year": 2023,
        "color": "Antimatter Blue",
        "price": Decimal("59974.00"),
        "quantity_available": 4,
        "description": "All-electric full-size pickup truck.",
        "image_url": "https://images.unsplash.com/photo-1605893477799-b99e3b8b93fe",
        "type": VehicleType.TRUCK,
        "fuel_type": FuelType.ELECTRIC,
    },
    {
        "name": "Honda Civic",
        "brand": "Honda",
        "model": "Civic",
        "year": 2023,
        "color": "Sonic Gray",
        "price": Decimal("24650.00"),
        "quantity_available": 10,
        "description": "Compact sedan.",
        "image_url": "https://images.unsplash.com/photo-1606611013016-969c19ba27bb",
        "type": VehicleType.SEDAN,
        "fuel_type": FuelType.PETROL,
    },
]


def seed_vehicles(db: Session) -> int:
    """Insert the sample catalog if there are no vehicles yet. Returns rows inserted."""
    if repository.count_vehicles(db) > 0:
        return 0
    for data in SAMPLE_VEHICLES:
        db.add(Vehicle(**data))
    db.commit()
    logger.info("Seeded %d sample vehicles", len(SAMPLE_VEHICLES))
    return len(SAMPLE_VEHICLES)
