"""Per-client request quotas for the auth endpoints, counted in Redis."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Dict, Tuple

from fastapi import Request
import redis.asyncio as redis

from config import settings
from errors import RateLimitedError

logger = logging.getLogger(__name__)

KEY_PREFIX = "eco:rate"

# key -> (requests seen, window reset time); used only while Redis is unreachable.
_local_counters: Dict[str, Tuple[int, float]] = {}
_local_lock = asyncio.Lock()


def _client_identifier(request: Request) -> str:
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return "unknown"


async def _count_in_redis(key: str, window_seconds: int) -> int:
    client = redis.from_url(settings.REDIS_URL, decode_responses=True)
    try:
        current = await client.incr(key)
        if current == 1:
            await client.expire(key, window_seconds)
        return int(current)
    finally:
        await client.aclose()


async def _count_locally(key: str, window_seconds: int) -> int:
    now = time.time()
    async with _local_lock:
        count, reset_at = _local_counters.get(key, (0, now + window_seconds))
        if now >= reset_at:
            count, reset_at = 0, now + window_seconds
        count += 1
        _local_counters[key] = (count, reset_at)
        return count


def rate_limit(prefix: str, limit: int, window_seconds: int) -> Callable[[Request], Awaitable[None]]:
    """Dependency raising RateLimitedError once a client exceeds `limit` calls per window."""

    async def _dependency(request: Request) -> None:
        if getattr(request.app.state, "disable_rate_limits", False):
            return

        key = f"{KEY_PREFIX}:{prefix}:{_client_identifier(request)}"
        try:
            current = await _count_in_redis(key, window_seconds)
        except (redis.RedisError, OSError) as exc:
            logger.warning("Rate limit store unavailable, counting in process: %s", exc)
            current = await _count_locally(key, window_seconds)

        if current > limit:
            logger.info("rate_limited prefix=%s count=%s limit=%s", prefix, current, limit)
            raise RateLimitedError(f"Too many {prefix.replace('_', ' ')} requests. Try again later.")

    return _dependency
