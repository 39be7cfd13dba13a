"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .reservation_guard import ReservationGuard
from .local_guard import LocalReservationGuard

__all__ = ['ReservationGuard', 'LocalReservationGuard']
