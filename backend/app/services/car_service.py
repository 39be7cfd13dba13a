"""
Car listing CRUD. Only a car's owner may change or remove it.
"""

from typing import Optional

from app.core.exceptions import ForbiddenException, ValidationException
from app.core.logging import get_logger
from app.infrastructure.booking_store import BookingStore
from app.models.car import Car
from app.schemas.car import CarCreate, CarUpdate
from app.services.availability_service import get_car_or_404

logger = get_logger(__name__)

BRANCHES = [
    {"code": "DAC", "name": "Dhaka Airport"},
    {"code": "CTG", "name": "Chattogram"},
    {"code": "SYL", "name": "Sylhet"},
]


async def create_car(store: BookingStore, car_data: CarCreate, owner_email: str) -> Car:
    car = await store.add_car(
        Car(
            model=car_data.model,
            daily_price=car_data.daily_price,
            images=list(car_data.images),
            description=car_data.description,
            branch=car_data.branch,
            owner_email=owner_email,
            booking_count=0,
        )
    )
    logger.info("car_created", car_id=car.id, owner=owner_email, daily_price=car.daily_price)
    return car


async def list_cars(store: BookingStore, branch: Optional[str] = None) -> list[Car]:
    return await store.list_cars(branch)


async def _owned_car(store: BookingStore, car_id: int, requester_email: str) -> Car:
    if car_id <= 0:
        raise ValidationException("Invalid car id")
    car = await get_car_or_404(store, car_id)
    if car.owner_email != requester_email:
        logger.warning("car_access_denied", car_id=car_id, requester=requester_email)
        raise ForbiddenException("You do not own this car")
    return car


async def update_car(store: BookingStore, car_id: int, car_data: CarUpdate, requester_email: str) -> Car:
    car = await _owned_car(store, car_id, requester_email)
    changes = car_data.model_dump(exclude_unset=True)
    if not changes:
        return car
    car = await store.update_car(car, changes)
    logger.info("car_updated", car_id=car_id, fields=sorted(changes))
    return car


async def delete_car(store: BookingStore, car_id: int, requester_email: str) -> None:
    await _owned_car(store, car_id, requester_email)
    await store.delete_car(car_id)
    logger.info("car_deleted", car_id=car_id, owner=requester_email)
