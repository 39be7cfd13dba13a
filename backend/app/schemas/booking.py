"""
Pydantic schemas for booking-related request/response validation.
"""

from datetime import datetime
from pydantic import BaseModel, Field

from app.schemas.common import UTCDateTime


class BookingCreate(BaseModel):
    car_id: int = Field(..., gt=0)
    start_date: UTCDateTime
    end_date: UTCDateTime


class BookingModify(BaseModel):
    start_date: UTCDateTime
    end_date: UTCDateTime


class BookingResponse(BaseModel):
    id: int
    car_id: int
    owner_email: str
    car_model: str
    car_image: str
    start_date: datetime
    end_date: datetime
    total_price: float
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class BookingCancelResponse(BaseModel):
    message: str
    booking_id: int
    status: str


class BookedRange(BaseModel):
    start_date: datetime
    end_date: datetime

    model_config = {"from_attributes": True}


class BookedRangesResponse(BaseModel):
    car_id: int
    bookings: list[BookedRange]
