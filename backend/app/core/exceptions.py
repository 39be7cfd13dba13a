"""
Domain exceptions raised by the booking core.

Services raise these instead of HTTP errors so they can be driven from any
transport. `register_exception_handlers` maps them onto JSON responses.
"""

from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging import get_logger

logger = get_logger(__name__)


class BookingAPIException(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationException(BookingAPIException):
    """Malformed id, date or missing field. The caller must fix the input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class NotFoundException(BookingAPIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class UnauthorizedException(BookingAPIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class ForbiddenException(BookingAPIException):
    """Caller is authenticated but does not own the resource."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class ConflictException(BookingAPIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class StoreException(BookingAPIException):
    """Persistence failure. Not retried by the core."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Storage backend failure"


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(BookingAPIException)
    async def _booking_exception_handler(request: Request, exc: BookingAPIException):
        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedException) else None
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=headers)

    @app.exception_handler(SQLAlchemyError)
    async def _store_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.error("store_error", error=str(exc), error_type=type(exc).__name__)
        return JSONResponse(
            status_code=StoreException.status_code,
            content={"detail": StoreException.default_detail},
        )
