"""
Reservation guard interface.
Serializes "check overlap, then write" per car so two requests for the same
car cannot both pass the overlap check before either write lands.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class ReservationGuard(ABC):
    """
    Interface for per-car critical sections.

    Implementations:
    - LocalReservationGuard: in-process asyncio.Lock per car
    - RedisReservationGuard: Redis lock per car, shared by all workers

    The optimistic version check on the car row stays authoritative; a guard
    only keeps contending writers from burning retries.
    """

    @abstractmethod
    def hold(self, car_id: int) -> AsyncContextManager[None]:
        """
        Hold the critical section for `car_id` for the duration of the
        `async with` block.
        """
        pass
