from app.schemas.auth import TokenRequest, Token
from app.schemas.car import CarCreate, CarUpdate, CarResponse, CarListResponse
from app.schemas.booking import BookingCreate, BookingModify, BookingResponse
from app.schemas.feedback import FeedbackCreate, FeedbackResponse

__all__ = [
    "TokenRequest", "Token",
    "CarCreate", "CarUpdate", "CarResponse", "CarListResponse",
    "BookingCreate", "BookingModify", "BookingResponse",
    "FeedbackCreate", "FeedbackResponse",
]
