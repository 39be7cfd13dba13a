"""
Booking endpoints. Every write runs through the booking lifecycle service,
which enforces ownership, the overlap rule and pricing.
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.core.security import get_current_user_email
from app.core.logging import get_logger
from app.infrastructure.booking_store import BookingStore, get_store
from app.schemas.booking import (
    BookedRangesResponse,
    BookingCancelResponse,
    BookingCreate,
    BookingModify,
    BookingResponse,
)
from app.services import booking_service
from app.services.availability_service import list_booked_ranges
from app.services.cache_service import invalidate_car_cache
from app.services.interfaces.reservation_guard import ReservationGuard
from app.services.strategy_factory import get_reservation_guard

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
    guard: ReservationGuard = Depends(get_reservation_guard),
):
    """
    Book a car for a date range. The booking starts as `pending`.

    Returns 409 if any pending/confirmed booking for the car overlaps the
    range, including bookings that merely touch its first or last day.
    """
    booking = await booking_service.create_booking(
        store, guard, booking_data.car_id, email, booking_data.start_date, booking_data.end_date
    )
    # booking_count shown in listings changed
    await invalidate_car_cache()
    return booking


@router.get("/", response_model=list[BookingResponse])
async def list_user_bookings(
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Get all bookings for the authenticated user, newest first."""
    return await booking_service.get_owner_bookings(store, email)


@router.get("/car/{car_id}", response_model=BookedRangesResponse)
async def list_bookings_for_car(
    car_id: int,
    from_: Optional[datetime] = Query(None, alias="from"),
    to: Optional[datetime] = Query(None),
    store: BookingStore = Depends(get_store),
):
    """Booked (pending/confirmed) ranges for a car, earliest first."""
    ranges = await list_booked_ranges(store, car_id, from_, to)
    return BookedRangesResponse(
        car_id=car_id,
        bookings=[{"start_date": r.start_date, "end_date": r.end_date} for r in ranges],
    )


@router.put("/{booking_id}/confirm", response_model=BookingResponse)
async def confirm_booking(
    booking_id: int,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Confirm a pending booking. Confirming twice is a no-op."""
    return await booking_service.confirm_booking(store, booking_id, email)


@router.put("/{booking_id}/modify", response_model=BookingResponse)
async def modify_booking(
    booking_id: int,
    booking_data: BookingModify,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
    guard: ReservationGuard = Depends(get_reservation_guard),
):
    """Move a booking to new dates, repriced at its original daily rate."""
    return await booking_service.modify_booking(
        store, guard, booking_id, email, booking_data.start_date, booking_data.end_date
    )


@router.delete("/{booking_id}", response_model=BookingCancelResponse)
async def cancel_booking(
    booking_id: int,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Cancel a booking and release its dates."""
    booking = await booking_service.cancel_booking(store, booking_id, email)
    return BookingCancelResponse(
        message="Booking cancelled successfully",
        booking_id=booking.id,
        status=booking.status,
    )
