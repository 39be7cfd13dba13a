"""
Pydantic schemas for car listings.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, model_validator


class CarCreate(BaseModel):
    model: str = Field(..., min_length=1, max_length=255)
    daily_price: float = Field(..., ge=0)
    images: list[str] = Field(default_factory=list)
    description: Optional[str] = Field(None, max_length=2000)
    branch: Optional[str] = Field(None, max_length=10)


class CarUpdate(BaseModel):
    model: Optional[str] = Field(None, min_length=1, max_length=255)
    daily_price: Optional[float] = Field(None, ge=0)
    images: Optional[list[str]] = None
    description: Optional[str] = Field(None, max_length=2000)
    branch: Optional[str] = Field(None, max_length=10)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "CarUpdate":
        # NOT NULL columns may be omitted but not nulled
        for field in ("model", "daily_price", "images"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class CarResponse(BaseModel):
    id: int
    model: str
    daily_price: float
    images: list[str]
    description: Optional[str]
    branch: Optional[str]
    owner_email: str
    booking_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class CarListResponse(BaseModel):
    cars: list[CarResponse]
    total: int
    cached: bool = False


class AvailabilityResponse(BaseModel):
    car_id: int
    available: bool


class SearchItem(BaseModel):
    id: int
    model: str
    images: list[str]
    daily_price: float
    branch: Optional[str]
    price_before_deals: float
    final_price: float


class SearchResponse(BaseModel):
    items: list[SearchItem]
    days: int
    promo_applied: int


class Branch(BaseModel):
    code: str
    name: str


class LocationsResponse(BaseModel):
    branches: list[Branch]
