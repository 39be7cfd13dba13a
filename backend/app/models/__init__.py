from app.models.car import Car
from app.models.booking import Booking
from app.models.feedback import Feedback

__all__ = ["Car", "Booking", "Feedback"]
