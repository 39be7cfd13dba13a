"""
Store client consumed by the booking core.

Wraps one AsyncSession and exposes only the operations the services need:
point lookups, range/status filtered queries, distinct car ids for set
difference, conditional counter bumps and insert/update. Built per request by
`get_store` and injected into services; nothing here is module-global.
"""

from datetime import datetime
from typing import Optional, Sequence

from fastapi import Depends
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StoreException
from app.core.logging import get_logger
from app.db.session import get_db
from app.models.booking import ACTIVE_STATUSES, Booking
from app.models.car import Car
from app.models.feedback import Feedback

logger = get_logger(__name__)


def active_overlap(start: datetime, end: datetime):
    """
    Closed-interval overlap against active bookings:
    existing.start <= end AND existing.end >= start.
    Touching endpoints count as overlapping.
    """
    return (
        Booking.status.in_(ACTIVE_STATUSES),
        Booking.start_date <= end,
        Booking.end_date >= start,
    )


class BookingStore:
    def __init__(self, session: AsyncSession):
        self.session = session

    # Cars

    async def get_car(self, car_id: int) -> Optional[Car]:
        result = await self.session.execute(
            select(Car).where(Car.id == car_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_cars(self, branch: Optional[str] = None) -> list[Car]:
        query = select(Car)
        if branch:
            query = query.where(Car.branch == branch)
        result = await self.session.execute(query.order_by(Car.id.asc()))
        return list(result.scalars().all())

    async def cars_excluding(self, car_ids: Sequence[int], branch: Optional[str] = None) -> list[Car]:
        query = select(Car)
        if car_ids:
            query = query.where(Car.id.not_in(car_ids))
        if branch:
            query = query.where(Car.branch == branch)
        result = await self.session.execute(query.order_by(Car.id.asc()))
        return list(result.scalars().all())

    async def add_car(self, car: Car) -> Car:
        self.session.add(car)
        await self.session.flush()
        await self.session.refresh(car)
        return car

    async def update_car(self, car: Car, values: dict) -> Car:
        for field, value in values.items():
            setattr(car, field, value)
        await self.session.flush()
        await self.session.refresh(car)
        return car

    async def delete_car(self, car_id: int) -> None:
        await self.session.execute(delete(Booking).where(Booking.car_id == car_id))
        await self.session.execute(delete(Feedback).where(Feedback.car_id == car_id))
        await self.session.execute(delete(Car).where(Car.id == car_id))

    async def claim_car_version(self, car_id: int, version: int, count_booking: bool) -> bool:
        """
        Bump the car's version only if nobody else has since `version` was read.
        Optionally increments the display counter in the same statement.
        Returns False on a lost race.
        """
        values = {"version": Car.version + 1}
        if count_booking:
            values["booking_count"] = Car.booking_count + 1
        result = await self.session.execute(
            update(Car)
            .where(Car.id == car_id, Car.version == version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # Bookings

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        result = await self.session.execute(
            select(Booking).where(Booking.id == booking_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find_overlap(
        self,
        car_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> Optional[Booking]:
        query = select(Booking).where(Booking.car_id == car_id, *active_overlap(start, end))
        if exclude_booking_id is not None:
            query = query.where(Booking.id != exclude_booking_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none()

    async def booked_ranges(self, car_id: int, start: datetime, end: datetime) -> list:
        result = await self.session.execute(
            select(Booking.start_date, Booking.end_date)
            .where(Booking.car_id == car_id, *active_overlap(start, end))
            .order_by(Booking.start_date.asc())
        )
        return list(result.all())

    async def overlapped_car_ids(self, start: datetime, end: datetime) -> list[int]:
        result = await self.session.execute(
            select(Booking.car_id).where(*active_overlap(start, end)).distinct()
        )
        return list(result.scalars().all())

    async def insert_booking(self, booking: Booking) -> Booking:
        self.session.add(booking)
        await self.session.flush()
        await self.session.refresh(booking)
        return booking

    async def update_booking(self, booking_id: int, allowed_statuses: Sequence[str], **values) -> Optional[Booking]:
        """
        Write `values` only while the booking's stored status is still one of
        `allowed_statuses`. Returns the refreshed booking, or None when another
        writer moved the status on since it was read.
        """
        result = await self.session.execute(
            update(Booking)
            .where(Booking.id == booking_id, Booking.status.in_(allowed_statuses))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return None
        return await self.get_booking(booking_id)

    async def bookings_for_owner(self, owner_email: str) -> list[Booking]:
        result = await self.session.execute(
            select(Booking)
            .where(Booking.owner_email == owner_email)
            .order_by(Booking.created_at.desc(), Booking.id.desc())
        )
        return list(result.scalars().all())

    async def has_active_booking(self, car_id: int, owner_email: str) -> bool:
        result = await self.session.execute(
            select(Booking.id)
            .where(
                Booking.car_id == car_id,
                Booking.owner_email == owner_email,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .limit(1)
        )
        return result.scalar_one_or_none() is not None

    # Feedback

    async def add_feedback(self, feedback: Feedback) -> Feedback:
        self.session.add(feedback)
        await self.session.flush()
        await self.session.refresh(feedback)
        return feedback

    async def feedback_for_car(self, car_id: int) -> list[Feedback]:
        result = await self.session.execute(
            select(Feedback)
            .where(Feedback.car_id == car_id)
            .order_by(Feedback.created_at.desc(), Feedback.id.desc())
        )
        return list(result.scalars().all())

    # Transactions

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("store_commit_failed", error=str(e))
            raise StoreException() from e

    async def rollback(self) -> None:
        await self.session.rollback()


async def get_store(db: AsyncSession = Depends(get_db)) -> BookingStore:
    return BookingStore(db)
