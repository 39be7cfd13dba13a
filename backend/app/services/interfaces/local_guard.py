"""
In-process reservation guard.
One asyncio.Lock per car id, created on demand and dropped once unused.
"""

import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from app.services.interfaces.reservation_guard import ReservationGuard


class LocalReservationGuard(ReservationGuard):
    """
    Mutex per car within a single worker process.

    Use when:
    - Single worker deployment
    - Tests and local development
    Across processes the car version check still prevents double booking.
    """

    def __init__(self):
        self._locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, car_id: int) -> asyncio.Lock:
        lock = self._locks.get(car_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[car_id] = lock
        return lock

    @asynccontextmanager
    async def hold(self, car_id: int) -> AsyncIterator[None]:
        lock = self._lock_for(car_id)
        async with lock:
            yield
