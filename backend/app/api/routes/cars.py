"""
Car endpoints with Redis caching on the listing.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_user_email
from app.core.logging import get_logger
from app.infrastructure.booking_store import BookingStore, get_store
from app.schemas.car import AvailabilityResponse, CarCreate, CarListResponse, CarResponse, CarUpdate
from app.services import car_service
from app.services.availability_service import get_car_or_404, is_available
from app.services.cache_service import get_cached_cars, invalidate_car_cache, set_cached_cars

logger = get_logger(__name__)
router = APIRouter(prefix="/cars", tags=["Cars"])


@router.get("/", response_model=CarListResponse)
async def list_cars_endpoint(
    branch: Optional[str] = Query(None, max_length=10),
    store: BookingStore = Depends(get_store),
):
    """
    List cars, optionally for one branch.
    Results are cached in Redis and invalidated on car or booking writes.
    """
    cached = await get_cached_cars(branch)
    if cached:
        logger.info("cars_list_cache_hit", branch=branch)
        cached["cached"] = True
        return CarListResponse(**cached)

    cars = await car_service.list_cars(store, branch)
    response_data = {
        "cars": [CarResponse.model_validate(c).model_dump() for c in cars],
        "total": len(cars),
        "cached": False,
    }
    await set_cached_cars(branch, response_data)
    return CarListResponse(**response_data)


@router.post("/", response_model=CarResponse, status_code=status.HTTP_201_CREATED)
async def create_car_endpoint(
    car_data: CarCreate,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Create a car listing owned by the caller."""
    car = await car_service.create_car(store, car_data, email)
    await store.commit()
    await invalidate_car_cache()
    return car


@router.get("/{car_id}", response_model=CarResponse)
async def get_car_endpoint(car_id: int, store: BookingStore = Depends(get_store)):
    """Get a single car. Not cached (booking_count must be current)."""
    return await get_car_or_404(store, car_id)


@router.put("/{car_id}", response_model=CarResponse)
async def update_car_endpoint(
    car_id: int,
    car_data: CarUpdate,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Partially update a car. Owner only."""
    car = await car_service.update_car(store, car_id, car_data, email)
    await store.commit()
    await invalidate_car_cache()
    return car


@router.delete("/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_car_endpoint(
    car_id: int,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Delete a car with its bookings and feedback. Owner only."""
    await car_service.delete_car(store, car_id, email)
    await store.commit()
    await invalidate_car_cache()


@router.get("/{car_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    car_id: int,
    from_: datetime = Query(..., alias="from"),
    to: datetime = Query(...),
    store: BookingStore = Depends(get_store),
):
    """Whether the car has no active booking touching [from, to]."""
    available = await is_available(store, car_id, from_, to)
    return AvailabilityResponse(car_id=car_id, available=available)
