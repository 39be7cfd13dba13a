"""
Feedback on cars. Only renters holding a non-cancelled booking on the car
may leave feedback.
"""

from app.core.exceptions import ForbiddenException
from app.core.logging import get_logger
from app.infrastructure.booking_store import BookingStore
from app.models.feedback import Feedback
from app.schemas.feedback import FeedbackCreate
from app.services.availability_service import get_car_or_404

logger = get_logger(__name__)


async def add_feedback(
    store: BookingStore,
    car_id: int,
    author_email: str,
    feedback_data: FeedbackCreate,
) -> Feedback:
    await get_car_or_404(store, car_id)

    if not await store.has_active_booking(car_id, author_email):
        raise ForbiddenException("Only renters of this car can leave feedback")

    feedback = await store.add_feedback(
        Feedback(
            car_id=car_id,
            author_email=author_email,
            rating=feedback_data.rating,
            comment=feedback_data.comment,
        )
    )
    logger.info("feedback_added", car_id=car_id, feedback_id=feedback.id, rating=feedback.rating)
    return feedback


async def list_feedback(store: BookingStore, car_id: int) -> list[Feedback]:
    await get_car_or_404(store, car_id)
    return await store.feedback_for_car(car_id)
