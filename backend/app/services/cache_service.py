"""
Redis caching service for car listings.

CACHING STRATEGY
================

What we cache:
  - The public car listing (JSON-serialized), one entry per branch filter
  - Cache key pattern: "cars:list:branch={branch}"

Why:
  - The car listing is the most frequent read on the site
  - It changes only when cars are edited or booked (booking_count)

Invalidation strategy:
  - On car create/update/delete: delete all car list keys
  - On booking create: delete all car list keys (booking_count changed)
  - TTL-based expiry as safety net

  All listing keys share the "cars:list:" prefix, so invalidation is a SCAN
  over that prefix.

Why NOT cache availability:
  - Availability answers must reflect every committed booking; a stale "free"
    answer invites conflicts at booking time
"""

import json
from typing import Optional

from app.core.config import get_settings
from app.core.logging import get_logger
from app.core.metrics import record_cache_operation
from app.infrastructure.redis_client import get_redis

logger = get_logger(__name__)
settings = get_settings()

CAR_LIST_PREFIX = "cars:list:"


def _make_car_list_key(branch: Optional[str]) -> str:
    return f"{CAR_LIST_PREFIX}branch={branch or '*'}"


async def get_cached_cars(branch: Optional[str]) -> Optional[dict]:
    """Retrieve cached car list response."""
    client = await get_redis()
    if not client:
        return None

    key = _make_car_list_key(branch)
    try:
        data = await client.get(key)
        record_cache_operation("get", hit=bool(data))
        if data:
            logger.debug("cache_hit", key=key)
            return json.loads(data)
        logger.debug("cache_miss", key=key)
    except Exception as e:
        logger.error("cache_get_error", key=key, error=str(e))

    return None


async def set_cached_cars(branch: Optional[str], data: dict) -> None:
    """Cache car list response with TTL."""
    client = await get_redis()
    if not client:
        return

    key = _make_car_list_key(branch)
    try:
        await client.setex(key, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=key, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=key, error=str(e))


async def invalidate_car_cache() -> None:
    """
    Invalidate all cached car listings.
    Uses SCAN to find and delete all keys matching the prefix.
    """
    client = await get_redis()
    if not client:
        return

    try:
        deleted = 0
        async for key in client.scan_iter(match=f"{CAR_LIST_PREFIX}*", count=100):
            await client.delete(key)
            deleted += 1
        logger.info("cache_invalidated", keys_deleted=deleted)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))


async def get_cache_stats() -> dict:
    """Get Redis cache statistics for monitoring."""
    client = await get_redis()
    if not client:
        return {"status": "disabled"}

    try:
        info = await client.info("stats")
        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }
    except Exception as e:
        return {"status": "error", "error": str(e)}
