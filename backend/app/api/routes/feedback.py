"""
Feedback endpoints nested under cars.
"""

from fastapi import APIRouter, Depends, status

from app.core.security import get_current_user_email
from app.infrastructure.booking_store import BookingStore, get_store
from app.schemas.feedback import FeedbackCreate, FeedbackResponse
from app.services.feedback_service import add_feedback, list_feedback

router = APIRouter(prefix="/cars/{car_id}/feedback", tags=["Feedback"])


@router.get("/", response_model=list[FeedbackResponse])
async def list_car_feedback(car_id: int, store: BookingStore = Depends(get_store)):
    return await list_feedback(store, car_id)


@router.post("/", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def create_car_feedback(
    car_id: int,
    feedback_data: FeedbackCreate,
    email: str = Depends(get_current_user_email),
    store: BookingStore = Depends(get_store),
):
    """Leave feedback on a car you hold a booking for."""
    return await add_feedback(store, car_id, email, feedback_data)
