"""
Booking of a car for a date range.

Key design decisions:
- Status field allows cancellation without deleting records; cancelled rows
  never count toward occupancy
- Car model/image are snapshotted at booking time so later listing edits do
  not rewrite booking history
- Composite index on (car_id, start_date, end_date) serves the overlap query
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

ACTIVE_STATUSES = (PENDING, CONFIRMED)


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False)
    owner_email = Column(String(255), nullable=False)
    car_model = Column(String(255), nullable=False, default="")
    car_image = Column(String(1000), nullable=False, default="")
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    total_price = Column(Float, nullable=False)
    status = Column(String(20), nullable=False, default=PENDING)

    car = relationship("Car", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="check_booking_range_ordered"),
        CheckConstraint("total_price >= 0", name="check_booking_total_price_non_negative"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled')", name="check_booking_status"
        ),
        Index("ix_bookings_car_range", "car_id", "start_date", "end_date"),
        Index("ix_bookings_owner_created", "owner_email", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, car={self.car_id}, owner={self.owner_email}, status={self.status})>"
