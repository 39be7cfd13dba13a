"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .redis_client import get_redis, close_redis
from .booking_store import BookingStore

__all__ = ['get_redis', 'close_redis', 'BookingStore']
