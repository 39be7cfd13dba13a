"""
Reservation guard factory.
Configures which per-car locking strategy booking writes use.
"""

from typing import Optional

from app.core.config import get_settings
from app.services.interfaces.reservation_guard import ReservationGuard
from app.services.interfaces.local_guard import LocalReservationGuard
from app.services.redis_guard import RedisReservationGuard


def build_reservation_guard(strategy: Optional[str] = None) -> ReservationGuard:
    """
    Build a reservation guard.

    Strategy selection via RESERVATION_GUARD:
    - local: LocalReservationGuard (single process, default)
    - redis: RedisReservationGuard (several workers)
    """
    strategy = (strategy or get_settings().RESERVATION_GUARD).lower()

    if strategy == 'redis':
        return RedisReservationGuard()
    if strategy == 'local':
        return LocalReservationGuard()
    raise ValueError(f"Unknown reservation guard strategy: {strategy}")


# Singleton instance
_guard: Optional[ReservationGuard] = None


def get_reservation_guard() -> ReservationGuard:
    """Get reservation guard singleton."""
    global _guard
    if _guard is None:
        _guard = build_reservation_guard()
    return _guard
