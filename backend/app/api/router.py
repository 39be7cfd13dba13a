"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from app.api.routes import auth, cars, bookings, feedback, search

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(cars.router)
api_router.include_router(feedback.router)
api_router.include_router(bookings.router)
api_router.include_router(search.router)
