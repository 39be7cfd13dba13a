"""
Races between workers that share only the database.

Each worker gets its own session (its own connection) and no shared
reservation guard, so only the conditional writes in the store keep
bookings consistent.
"""

from contextlib import asynccontextmanager

import pytest
from sqlalchemy import select

from app.core.exceptions import ConflictException
from app.infrastructure.booking_store import BookingStore
from app.models.booking import ACTIVE_STATUSES, Booking, CANCELLED, PENDING
from app.models.car import Car
from app.services import booking_service
from app.services.interfaces.reservation_guard import ReservationGuard
from conftest import OTHER_EMAIL, RENTER_EMAIL, make_booking, make_car, utc


class UnsharedGuard(ReservationGuard):
    """A guard that serializes nothing, as between separate processes."""

    @asynccontextmanager
    async def hold(self, car_id: int):
        yield


async def active_bookings(session_factory, car_id: int) -> list:
    async with session_factory() as session:
        rows = await session.execute(
            select(Booking.owner_email, Booking.status)
            .where(Booking.car_id == car_id, Booking.status.in_(ACTIVE_STATUSES))
            .order_by(Booking.id)
        )
        return list(rows.all())


@pytest.mark.asyncio
async def test_second_writer_loses_version_claim_and_conflicts(session_factory, monkeypatch):
    """Both workers pass the overlap check; the later version claim fails and the retry sees the winner."""
    async with session_factory() as setup:
        car = await make_car(setup)
        car_id = car.id

    async with session_factory() as first, session_factory() as second:
        loser = BookingStore(first)
        claim = loser.claim_car_version
        claims = []

        async def other_worker_books_first(*args, **kwargs):
            if not claims:
                await booking_service.create_booking(
                    BookingStore(second), UnsharedGuard(), car_id, OTHER_EMAIL, utc(2024, 4, 3), utc(2024, 4, 8)
                )
            claimed = await claim(*args, **kwargs)
            claims.append(claimed)
            return claimed

        monkeypatch.setattr(loser, "claim_car_version", other_worker_books_first)

        with pytest.raises(ConflictException):
            await booking_service.create_booking(
                loser, UnsharedGuard(), car_id, RENTER_EMAIL, utc(2024, 4, 1), utc(2024, 4, 5)
            )

    assert claims == [False]
    assert await active_bookings(session_factory, car_id) == [(OTHER_EMAIL, PENDING)]

    async with session_factory() as check:
        car = await check.get(Car, car_id)
        assert car.booking_count == 1


@pytest.mark.asyncio
async def test_confirm_does_not_revive_booking_cancelled_meanwhile(session_factory, monkeypatch):
    """Cancel and rebook land between confirm's read and its write."""
    async with session_factory() as setup:
        car = await make_car(setup)
        booking = await make_booking(setup, car, utc(2024, 1, 1), utc(2024, 1, 3))
        car_id, booking_id = car.id, booking.id

    async with session_factory() as s1, session_factory() as s2, session_factory() as s3:
        confirming = BookingStore(s1)
        write = confirming.update_booking

        async def cancel_and_rebook_first(*args, **kwargs):
            await booking_service.cancel_booking(BookingStore(s2), booking_id, RENTER_EMAIL)
            await s2.commit()
            await booking_service.create_booking(
                BookingStore(s3), UnsharedGuard(), car_id, OTHER_EMAIL, utc(2024, 1, 1), utc(2024, 1, 3)
            )
            return await write(*args, **kwargs)

        monkeypatch.setattr(confirming, "update_booking", cancel_and_rebook_first)

        with pytest.raises(ConflictException):
            await booking_service.confirm_booking(confirming, booking_id, RENTER_EMAIL)
        await s1.commit()

    assert await active_bookings(session_factory, car_id) == [(OTHER_EMAIL, PENDING)]

    async with session_factory() as check:
        original = await check.get(Booking, booking_id)
        assert original.status == CANCELLED


@pytest.mark.asyncio
async def test_modify_does_not_move_booking_cancelled_meanwhile(session_factory, monkeypatch):
    async with session_factory() as setup:
        car = await make_car(setup)
        booking = await make_booking(setup, car, utc(2024, 1, 1), utc(2024, 1, 3), total_price=150)
        car_id, booking_id = car.id, booking.id

    async with session_factory() as s1, session_factory() as s2:
        modifying = BookingStore(s1)
        claim = modifying.claim_car_version

        async def cancel_first(*args, **kwargs):
            await booking_service.cancel_booking(BookingStore(s2), booking_id, RENTER_EMAIL)
            await s2.commit()
            return await claim(*args, **kwargs)

        monkeypatch.setattr(modifying, "claim_car_version", cancel_first)

        with pytest.raises(ConflictException):
            await booking_service.modify_booking(
                modifying, UnsharedGuard(), booking_id, RENTER_EMAIL, utc(2024, 2, 1), utc(2024, 2, 4)
            )

    async with session_factory() as check:
        stored = await check.get(Booking, booking_id)
        assert stored.status == CANCELLED
        assert stored.start_date.day == 1 and stored.start_date.month == 1
        assert stored.total_price == 150
