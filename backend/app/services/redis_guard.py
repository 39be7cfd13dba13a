"""
Redis-backed reservation guard for multi-worker deployments.
Implements ReservationGuard with one Redis lock per car.

Circuit Breaker Pattern:
  If Redis is disabled or unreachable the guard "fails open": the request
  proceeds without the distributed lock and the optimistic version check on
  the car row decides. Temporary degradation is better than refusing all
  bookings, and the database still prevents double booking.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.exceptions import LockError, RedisError

from app.core.config import get_settings
from app.core.exceptions import ConflictException
from app.core.logging import get_logger
from app.core.metrics import redis_connection_errors, reservation_guard_fallbacks
from app.infrastructure.redis_client import get_redis
from app.services.interfaces.reservation_guard import ReservationGuard

logger = get_logger(__name__)
settings = get_settings()


class RedisReservationGuard(ReservationGuard):
    """
    Distributed mutex per car.

    Use when:
    - Several API workers or hosts share one database
    - Popular cars see bursts of simultaneous booking attempts
    """

    def __init__(self, timeout: int = settings.RESERVATION_LOCK_TIMEOUT):
        self.timeout = timeout

    @staticmethod
    def lock_key(car_id: int) -> str:
        return f"reservation:car:{car_id}"

    @asynccontextmanager
    async def hold(self, car_id: int) -> AsyncIterator[None]:
        lock = None
        client = await get_redis()

        if client is None:
            reservation_guard_fallbacks.inc()
        else:
            candidate = client.lock(
                self.lock_key(car_id),
                timeout=self.timeout,
                blocking_timeout=self.timeout,
            )
            try:
                acquired = await candidate.acquire()
            except RedisError as e:
                redis_connection_errors.inc()
                reservation_guard_fallbacks.inc()
                logger.warning("reservation_guard_fail_open", car_id=car_id, error=str(e))
            else:
                if not acquired:
                    logger.warning("reservation_guard_timeout", car_id=car_id, timeout=self.timeout)
                    raise ConflictException("Car is busy with another booking. Please try again.")
                lock = candidate

        try:
            yield
        finally:
            if lock is not None:
                try:
                    await lock.release()
                except (LockError, RedisError) as e:
                    # Lock expired under us; the version check already covered the write
                    logger.warning("reservation_guard_release_failed", car_id=car_id, error=str(e))
