"""
Car listing owned by a user (identified by email).

Key design decisions:
- `booking_count` is a denormalized display counter, bumped in the same
  transaction as the booking insert
- `version` enables optimistic locking: every booking write for a car bumps it,
  so two concurrent writers for the same car cannot both commit
"""

from sqlalchemy import Column, Integer, String, Float, JSON, Index, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class Car(Base, TimestampMixin):
    __tablename__ = "cars"

    id = Column(Integer, primary_key=True, index=True)
    model = Column(String(255), nullable=False)
    daily_price = Column(Float, nullable=False, default=0.0)
    images = Column(JSON, nullable=False, default=list)
    description = Column(String(2000), nullable=True)
    branch = Column(String(10), nullable=True)
    owner_email = Column(String(255), nullable=False, index=True)
    booking_count = Column(Integer, nullable=False, default=0)

    # Optimistic locking version counter
    version = Column(Integer, nullable=False, default=1)

    bookings = relationship("Booking", back_populates="car", lazy="raise", passive_deletes=True)
    feedback = relationship("Feedback", back_populates="car", lazy="raise", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("daily_price >= 0", name="check_car_daily_price_non_negative"),
        CheckConstraint("booking_count >= 0", name="check_car_booking_count_non_negative"),
        Index("ix_cars_branch", "branch"),
    )

    @property
    def first_image(self) -> str:
        return self.images[0] if self.images else ""

    def __repr__(self) -> str:
        return f"<Car(id={self.id}, model={self.model}, daily_price={self.daily_price})>"
