from __future__ import annotations

import json
from typing import Any

import redis
from ..core.config import get_settings


def _get_sync_redis(url: str) -> redis.Redis:
    """
    Create a fresh sync Redis client per call so no client outlives the
    event loop of the request that created it.
    """
    return redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=5,
        socket_connect_timeout=5,
    )


async def cached_get(
    key: str,
    set_value: Any | None = None,
    ttl: int | None = None,
) -> Any:
    """
    Async TTL cache backed by Redis.

    Usage:

        value = await cached_get("k")                  # read
        await cached_get("k", set_value=value, ttl=60) # write with TTL

    - On read: returns cached value (deserialized JSON) or None if missing/expired.
    - On write: stores value (serialized JSON) with optional TTL and returns it.
    - Without REDIS_URL the cache is disabled and reads always miss.
    """
    url = get_settings().REDIS_URL
    if not url:
        return None

    client = _get_sync_redis(url)
    try:
        if set_value is None:
            val = client.get(key)
            if val is not None:
                return json.loads(val)
            return None

        serialized = json.dumps(set_value)
        if ttl is not None:
            client.set(key, serialized, ex=ttl)
        else:
            client.set(key, serialized)
        return set_value

    except (redis.RedisError, ValueError):
        return None
    finally:
        try:
            client.close()
        except redis.RedisError:
            pass
