"""
Tests for reservation guards and the strategy factory.
"""

import asyncio

import pytest

from app.core.exceptions import ConflictException
from app.services import redis_guard
from app.services.interfaces.local_guard import LocalReservationGuard
from app.services.redis_guard import RedisReservationGuard
from app.services.strategy_factory import build_reservation_guard


@pytest.mark.asyncio
async def test_local_guard_serializes_same_car():
    guard = LocalReservationGuard()
    events = []

    async def worker(name: str):
        async with guard.hold(1):
            events.append(f"{name}:enter")
            await asyncio.sleep(0.01)
            events.append(f"{name}:exit")

    await asyncio.gather(worker("a"), worker("b"))
    assert events == ["a:enter", "a:exit", "b:enter", "b:exit"]


@pytest.mark.asyncio
async def test_local_guard_does_not_block_other_cars():
    guard = LocalReservationGuard()
    entered = asyncio.Event()

    async def holder():
        async with guard.hold(1):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other_car():
        async with guard.hold(2):
            entered.set()

    await asyncio.gather(holder(), other_car())
    assert entered.is_set()


@pytest.mark.asyncio
async def test_redis_guard_fails_open_without_redis(monkeypatch):
    async def no_redis():
        return None

    monkeypatch.setattr(redis_guard, "get_redis", no_redis)
    ran = False
    async with RedisReservationGuard().hold(7):
        ran = True
    assert ran


class FakeLock:
    def __init__(self, acquired: bool):
        self.acquired = acquired
        self.released = False

    async def acquire(self):
        return self.acquired

    async def release(self):
        self.released = True


class FakeRedis:
    def __init__(self, lock: FakeLock):
        self._lock = lock
        self.names = []

    def lock(self, name, timeout=None, blocking_timeout=None):
        self.names.append(name)
        return self._lock


@pytest.mark.asyncio
async def test_redis_guard_acquires_and_releases(monkeypatch):
    lock = FakeLock(acquired=True)
    client = FakeRedis(lock)

    async def fake_redis():
        return client

    monkeypatch.setattr(redis_guard, "get_redis", fake_redis)
    async with RedisReservationGuard().hold(7):
        assert not lock.released
    assert lock.released
    assert client.names == ["reservation:car:7"]


@pytest.mark.asyncio
async def test_redis_guard_timeout_is_conflict(monkeypatch):
    client = FakeRedis(FakeLock(acquired=False))

    async def fake_redis():
        return client

    monkeypatch.setattr(redis_guard, "get_redis", fake_redis)
    with pytest.raises(ConflictException):
        async with RedisReservationGuard().hold(7):
            pass


def test_strategy_factory():
    assert isinstance(build_reservation_guard("local"), LocalReservationGuard)
    assert isinstance(build_reservation_guard("redis"), RedisReservationGuard)
    with pytest.raises(ValueError):
        build_reservation_guard("queue")
