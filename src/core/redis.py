from __future__ import annotations

import logging
from collections.abc import AsyncGenerator

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.core.config import settings

logger = logging.getLogger(__name__)


def create_redis() -> aioredis.Redis:
    """Client for the write throttle; short timeouts so an outage fails open fast."""
    return aioredis.from_url(  # type: ignore[no-untyped-call]
        settings.redis_url,
        decode_responses=True,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
    )


redis_client: aioredis.Redis = create_redis()


async def close_redis() -> None:
    try:
        await redis_client.aclose()
    except RedisError as e:
        logger.warning(f"Error closing Redis connection: {e}")


async def get_redis() -> AsyncGenerator[aioredis.Redis]:
    yield redis_client
