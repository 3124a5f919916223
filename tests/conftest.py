from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["APP_LOG_LEVEL"] = "WARNING"

import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable, Generator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from src.core.database import get_db
from src.core.redis import get_redis
from src.main import app
from src.models import Base, Item
from src.schemas import SalesOrderInput


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def make_item(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[uuid.UUID]]:
    async def _make(name: str, stock: int, sku: str | None = None) -> uuid.UUID:
        async with session_factory() as session:
            item = Item(name=name, sku=sku, stock=stock, price=10)
            session.add(item)
            await session.commit()
            return item.id

    return _make


@pytest.fixture
def stock_of(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[uuid.UUID], Awaitable[int]]:
    async def _stock(item_id: uuid.UUID) -> int:
        async with session_factory() as session:
            value = await session.scalar(select(Item.stock).where(Item.id == item_id))
            assert value is not None
            return value

    return _stock


@pytest.fixture
def order_input() -> Callable[..., SalesOrderInput]:
    """Build a validated payload from ``(item_id, quantity)`` pairs."""

    def _build(
        *lines: tuple[uuid.UUID | None, float],
        status: str = "draft",
        **fields: Any,
    ) -> SalesOrderInput:
        return SalesOrderInput.model_validate(
            {
                "status": status,
                "items": [
                    {
                        "item_id": str(item_id) if item_id else None,
                        "quantity": quantity,
                        "rate": 5,
                    }
                    for item_id, quantity in lines
                ],
                **fields,
            }
        )

    return _build


@pytest.fixture
def mock_redis() -> Generator[AsyncMock, None, None]:
    redis = AsyncMock()
    redis.incr.return_value = 1
    app.dependency_overrides[get_redis] = lambda: redis
    yield redis
    app.dependency_overrides.pop(get_redis, None)


@pytest.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    mock_redis: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_db, None)
