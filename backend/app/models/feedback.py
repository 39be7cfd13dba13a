"""
Renter feedback on a car.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin


class Feedback(Base, TimestampMixin):
    __tablename__ = "feedback"

    id = Column(Integer, primary_key=True, index=True)
    car_id = Column(Integer, ForeignKey("cars.id", ondelete="CASCADE"), nullable=False, index=True)
    author_email = Column(String(255), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(String(2000), nullable=True)

    car = relationship("Car", back_populates="feedback")

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="check_feedback_rating_range"),
    )

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, car={self.car_id}, rating={self.rating})>"
