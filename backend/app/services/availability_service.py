"""
Availability checks over the booking store.

Only `pending` and `confirmed` bookings occupy a car; cancelled bookings are
ignored forever. Ranges are closed intervals, so a booking ending on the day
another starts still conflicts. Pure reads, no side effects.
"""

from datetime import datetime, timezone
from typing import Optional

from app.core.exceptions import NotFoundException, ValidationException
from app.core.logging import get_logger
from app.core.metrics import record_availability_check
from app.infrastructure.booking_store import BookingStore
from app.models.car import Car
from app.schemas.common import ensure_utc
from app.services.pricing import apply_promo, promo_percent, rental_days

logger = get_logger(__name__)

OPEN_WINDOW_START = datetime(1970, 1, 1, tzinfo=timezone.utc)
OPEN_WINDOW_END = datetime(2999, 12, 31, tzinfo=timezone.utc)


def validate_range(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    """Normalize both ends to UTC and require end >= start."""
    if not isinstance(start, datetime) or not isinstance(end, datetime):
        raise ValidationException("Invalid dates")
    start, end = ensure_utc(start), ensure_utc(end)
    if end < start:
        raise ValidationException("End date must not be before start date")
    return start, end


async def get_car_or_404(store: BookingStore, car_id: int) -> Car:
    car = await store.get_car(car_id)
    if not car:
        raise NotFoundException(f"Car {car_id} not found")
    return car


async def is_available(store: BookingStore, car_id: int, start: datetime, end: datetime) -> bool:
    start, end = validate_range(start, end)
    await get_car_or_404(store, car_id)

    overlap = await store.find_overlap(car_id, start, end)
    available = overlap is None
    record_availability_check(available)
    return available


async def list_booked_ranges(
    store: BookingStore,
    car_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list:
    """Active booked ranges intersecting [start, end], earliest first. Open ends are unbounded."""
    start, end = validate_range(start or OPEN_WINDOW_START, end or OPEN_WINDOW_END)
    await get_car_or_404(store, car_id)
    return await store.booked_ranges(car_id, start, end)


async def search_available_cars(
    store: BookingStore,
    start: datetime,
    end: datetime,
    branch: Optional[str] = None,
    promo: Optional[str] = None,
) -> dict:
    """
    Cars with no active booking intersecting the window, priced for it.

    Set difference: distinct car ids of overlapping active bookings are
    excluded from the (optionally branch-filtered) car listing.
    """
    start, end = validate_range(start, end)

    booked_ids = await store.overlapped_car_ids(start, end)
    cars = await store.cars_excluding(booked_ids, branch)

    days = rental_days(start, end)
    percent = promo_percent(promo)

    items = []
    for car in cars:
        base = (car.daily_price or 0) * days
        items.append({
            "id": car.id,
            "model": car.model,
            "images": car.images or [],
            "daily_price": car.daily_price,
            "branch": car.branch,
            "price_before_deals": base,
            "final_price": apply_promo(base, percent),
        })

    logger.info(
        "cars_searched",
        branch=branch,
        days=days,
        excluded=len(booked_ids),
        results=len(items),
        promo_applied=percent,
    )
    return {"items": items, "days": days, "promo_applied": percent}
