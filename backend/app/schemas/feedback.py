"""
Pydantic schemas for car feedback.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class FeedbackCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class FeedbackResponse(BaseModel):
    id: int
    car_id: int
    author_email: str
    rating: int
    comment: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}
