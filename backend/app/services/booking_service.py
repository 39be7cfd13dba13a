"""
Booking lifecycle: create, confirm, modify, cancel.

States: pending -> confirmed, pending -> cancelled, confirmed -> cancelled.
Nothing leaves cancelled.

CONCURRENCY STRATEGY: Reservation Guard + Optimistic Locking with Retry
=======================================================================

Problem:
  Two users book overlapping dates on the same car simultaneously.
  Both run the overlap query, both see no conflict, both insert.
  Result: Double booking.

Solution:
  1. A ReservationGuard serializes create/modify per car id (in-process lock
     or Redis lock, see strategy_factory).
  2. Every write for a car bumps `cars.version` with
       UPDATE cars SET version = version + 1 [, booking_count = booking_count + 1]
       WHERE id = :car_id AND version = :read_version
     If rows_affected == 0 another writer got there first -> roll back,
     re-run the overlap check, retry.

  The guard keeps contention cheap; the version check is the part that holds
  across workers and hosts. The booking insert and the counter bump commit in
  one transaction, so a booking never exists without its counter increment.

Pricing:
  New bookings are priced at the car's listed daily price. Modifications
  reprice at the booking's own locked rate (total_price / original days), so
  later listing price changes never affect an existing renter.

Status writes are conditional on the stored status
(UPDATE ... WHERE id = :id AND status IN (:allowed)), so a booking cancelled
by a concurrent request is never confirmed or moved afterwards.

Confirming an already confirmed booking is a no-op rather than an error.
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime

from app.core.config import get_settings
from app.core.exceptions import (
    BookingAPIException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from app.core.logging import get_logger
from app.core.metrics import booking_latency, db_retries, record_booking_attempt, record_transition
from app.infrastructure.booking_store import BookingStore
from app.models.booking import ACTIVE_STATUSES, CANCELLED, CONFIRMED, PENDING, Booking
from app.services.availability_service import get_car_or_404, validate_range
from app.services.interfaces.reservation_guard import ReservationGuard
from app.services.pricing import locked_daily_rate, rental_days

logger = get_logger(__name__)
settings = get_settings()


def _require_id(value: int, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValidationException(f"Invalid {name}")


def _require_requester(email: str) -> None:
    if not email:
        raise UnauthorizedException()


@asynccontextmanager
async def _instrumented(operation: str):
    started = time.perf_counter()
    try:
        yield
    except ConflictException:
        record_booking_attempt(operation, "conflict")
        raise
    except BookingAPIException:
        record_booking_attempt(operation, "rejected")
        raise
    except Exception:
        record_booking_attempt(operation, "error")
        raise
    else:
        record_booking_attempt(operation, "success")
    finally:
        booking_latency.labels(operation=operation).observe(time.perf_counter() - started)


async def _owned_booking(store: BookingStore, booking_id: int, requester_email: str) -> Booking:
    booking = await store.get_booking(booking_id)
    if not booking:
        raise NotFoundException(f"Booking {booking_id} not found")
    if booking.owner_email != requester_email:
        logger.warning("booking_access_denied", booking_id=booking_id, requester=requester_email)
        raise ForbiddenException("You do not own this booking")
    return booking


async def _status_moved(store: BookingStore, booking_id: int, operation: str) -> Booking:
    """Re-read a booking whose conditional status write matched no row."""
    current = await store.get_booking(booking_id)
    if not current:
        raise NotFoundException(f"Booking {booking_id} not found")
    logger.warning("booking_status_moved", booking_id=booking_id, operation=operation, status=current.status)
    return current


async def _lost_race(store: BookingStore, attempt: int, **context) -> None:
    db_retries.inc()
    logger.info("booking_retry", attempt=attempt, reason="version_conflict", **context)
    await store.rollback()
    if attempt >= settings.MAX_BOOKING_RETRIES:
        raise ConflictException("Booking failed due to high demand. Please try again.")


async def create_booking(
    store: BookingStore,
    guard: ReservationGuard,
    car_id: int,
    owner_email: str,
    start: datetime,
    end: datetime,
) -> Booking:
    """
    Book a car for [start, end] in `pending` state.
    Raises NotFound for an unknown car and Conflict on any overlap with an
    active booking, boundaries included.
    """
    _require_requester(owner_email)
    _require_id(car_id, "car id")
    start, end = validate_range(start, end)

    async with _instrumented("create"), guard.hold(car_id):
        for attempt in range(1, settings.MAX_BOOKING_RETRIES + 1):
            car = await get_car_or_404(store, car_id)

            overlap = await store.find_overlap(car_id, start, end)
            if overlap:
                logger.warning(
                    "booking_conflict",
                    car_id=car_id,
                    conflicting_booking_id=overlap.id,
                    start=start.isoformat(),
                    end=end.isoformat(),
                )
                raise ConflictException("Overlapping booking")

            if not await store.claim_car_version(car_id, car.version, count_booking=True):
                await _lost_race(store, attempt, car_id=car_id)
                continue

            days = rental_days(start, end)
            daily_rate = float(car.daily_price or 0)
            booking = await store.insert_booking(
                Booking(
                    car_id=car_id,
                    owner_email=owner_email,
                    car_model=car.model,
                    car_image=car.first_image,
                    start_date=start,
                    end_date=end,
                    total_price=days * daily_rate,
                    status=PENDING,
                )
            )
            await store.commit()

            logger.info(
                "booking_created",
                booking_id=booking.id,
                car_id=car_id,
                owner=owner_email,
                days=days,
                total_price=booking.total_price,
                attempt=attempt,
            )
            return booking

    raise ConflictException("Booking failed due to high demand. Please try again.")


async def confirm_booking(store: BookingStore, booking_id: int, requester_email: str) -> Booking:
    _require_requester(requester_email)
    _require_id(booking_id, "booking id")

    booking = await _owned_booking(store, booking_id, requester_email)

    if booking.status == CANCELLED:
        raise ConflictException("Cancelled bookings cannot be confirmed")
    if booking.status == CONFIRMED:
        logger.info("booking_already_confirmed", booking_id=booking_id)
        return booking

    confirmed = await store.update_booking(booking_id, (PENDING,), status=CONFIRMED)
    if confirmed is None:
        current = await _status_moved(store, booking_id, "confirm")
        if current.status == CONFIRMED:
            return current
        raise ConflictException("Cancelled bookings cannot be confirmed")

    booking = confirmed
    record_transition(CONFIRMED)
    logger.info("booking_confirmed", booking_id=booking_id, owner=requester_email)
    return booking


async def modify_booking(
    store: BookingStore,
    guard: ReservationGuard,
    booking_id: int,
    requester_email: str,
    new_start: datetime,
    new_end: datetime,
) -> Booking:
    """
    Move a booking to [new_start, new_end].
    The overlap check ignores the booking itself; the price is recomputed at
    the booking's locked daily rate.
    """
    _require_requester(requester_email)
    _require_id(booking_id, "booking id")
    new_start, new_end = validate_range(new_start, new_end)

    booking = await _owned_booking(store, booking_id, requester_email)
    car_id = booking.car_id

    async with _instrumented("modify"), guard.hold(car_id):
        for attempt in range(1, settings.MAX_BOOKING_RETRIES + 1):
            booking = await _owned_booking(store, booking_id, requester_email)
            if booking.status == CANCELLED:
                raise ConflictException("Cancelled bookings cannot be modified")

            car = await get_car_or_404(store, car_id)

            overlap = await store.find_overlap(car_id, new_start, new_end, exclude_booking_id=booking_id)
            if overlap:
                logger.warning(
                    "booking_conflict",
                    car_id=car_id,
                    booking_id=booking_id,
                    conflicting_booking_id=overlap.id,
                )
                raise ConflictException("Overlapping booking")

            daily_rate = locked_daily_rate(booking.total_price, booking.start_date, booking.end_date)
            new_days = rental_days(new_start, new_end)

            if not await store.claim_car_version(car_id, car.version, count_booking=False):
                await _lost_race(store, attempt, car_id=car_id, booking_id=booking_id)
                continue

            booking = await store.update_booking(
                booking_id,
                ACTIVE_STATUSES,
                start_date=new_start,
                end_date=new_end,
                total_price=new_days * daily_rate,
            )
            if booking is None:
                await store.rollback()
                logger.warning("booking_status_moved", booking_id=booking_id, operation="modify")
                raise ConflictException("Cancelled bookings cannot be modified")
            await store.commit()

            logger.info(
                "booking_modified",
                booking_id=booking_id,
                car_id=car_id,
                days=new_days,
                daily_rate=daily_rate,
                total_price=booking.total_price,
            )
            return booking

    raise ConflictException("Booking failed due to high demand. Please try again.")


async def cancel_booking(store: BookingStore, booking_id: int, requester_email: str) -> Booking:
    """Cancel a pending or confirmed booking, releasing its dates."""
    _require_requester(requester_email)
    _require_id(booking_id, "booking id")

    booking = await _owned_booking(store, booking_id, requester_email)

    if booking.status == CANCELLED:
        raise ConflictException("Booking is already cancelled")

    previous = booking.status
    cancelled = await store.update_booking(booking_id, ACTIVE_STATUSES, status=CANCELLED)
    if cancelled is None:
        await _status_moved(store, booking_id, "cancel")
        raise ConflictException("Booking is already cancelled")

    booking = cancelled
    record_transition(CANCELLED)

    logger.info(
        "booking_cancelled",
        booking_id=booking_id,
        car_id=booking.car_id,
        previous_status=previous,
    )
    return booking


async def get_owner_bookings(store: BookingStore, owner_email: str) -> list[Booking]:
    """All bookings of a user, newest first."""
    _require_requester(owner_email)
    return await store.bookings_for_owner(owner_email)

