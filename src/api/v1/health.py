from __future__ import annotations

import time
from collections.abc import Awaitable

from fastapi import APIRouter, Depends
from redis.asyncio import Redis
from sqlalchemy import text

from src.api.deps import DbSession, get_redis
from src.schemas import DependencyHealth, HealthCheckResponse

router = APIRouter()


async def _probe(name: str, check: Awaitable[object]) -> DependencyHealth:
    start = time.monotonic()
    try:
        await check
    except Exception as exc:
        return DependencyHealth(name=name, status="error", message=str(exc))
    latency = (time.monotonic() - start) * 1000
    return DependencyHealth(name=name, status="ok", latency_ms=round(latency, 2))


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(
    db: DbSession,
    redis: Redis = Depends(get_redis),
) -> HealthCheckResponse:
    """Report database and Redis reachability.

    Redis only backs the write throttle, so losing it degrades the service
    rather than taking it down.
    """
    dependencies = {
        "database": await _probe("database", db.execute(text("SELECT 1"))),
        "redis": await _probe("redis", redis.ping()),
    }

    overall = "ok" if all(d.status == "ok" for d in dependencies.values()) else "degraded"

    return HealthCheckResponse(
        status=overall,
        version="0.1.0",
        dependencies=dependencies,
    )
