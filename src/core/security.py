from __future__ import annotations

import logging

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, Request, status
from redis.exceptions import RedisError

from src.core.config import settings
from src.core.redis import get_redis

logger = logging.getLogger(__name__)


def client_key(request: Request) -> str:
    """Identify the caller for throttling purposes.

    ``X-Forwarded-For`` is client-controlled, so it is only read when the
    service is configured to sit behind a trusted proxy.
    """
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client.host
    return "anonymous"


async def throttle_writes(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
) -> None:
    """Fixed-window limit on mutating requests per client address."""
    window = settings.write_rate_window_seconds
    key = f"throttle:writes:{client_key(request)}"

    try:
        count = await redis.incr(key)
        if count == 1:
            await redis.expire(key, window)
    except RedisError as e:
        logger.warning(f"Write throttle unavailable, allowing request: {e}")
        return

    if count > settings.write_rate_limit:
        logger.warning(f"Throttled writes for {key} ({count} in {window}s)")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many write requests, slow down",
            headers={"Retry-After": str(window)},
        )
