from __future__ import annotations

import pytest

from src.services.numbering import (
    format_order_no,
    next_sales_order_no,
    parse_order_no,
    peek_sales_order_no,
    reserve_sales_order_no,
)


@pytest.mark.unit
def test_format_and_parse() -> None:
    assert format_order_no(7) == "SO-0007"
    assert format_order_no(12345) == "SO-12345"
    assert parse_order_no("SO-0042") == 42
    assert parse_order_no(" SO-9 ") == 9
    assert parse_order_no("INV-0042") is None
    assert parse_order_no("custom") is None


@pytest.mark.asyncio
async def test_sequence_starts_at_one(session_factory) -> None:
    async with session_factory() as session:
        assert await peek_sales_order_no(session) == "SO-0001"
        assert await next_sales_order_no(session) == "SO-0001"
        assert await next_sales_order_no(session) == "SO-0002"
        assert await peek_sales_order_no(session) == "SO-0003"
        await session.commit()


@pytest.mark.asyncio
async def test_peek_does_not_consume(session_factory) -> None:
    async with session_factory() as session:
        await peek_sales_order_no(session)
        await peek_sales_order_no(session)
        assert await next_sales_order_no(session) == "SO-0001"


@pytest.mark.asyncio
async def test_reserve_only_moves_forward(session_factory) -> None:
    async with session_factory() as session:
        await reserve_sales_order_no(session, "SO-0010")
        await reserve_sales_order_no(session, "SO-0003")
        await reserve_sales_order_no(session, "custom-ref")
        assert await next_sales_order_no(session) == "SO-0011"


@pytest.mark.asyncio
async def test_rolled_back_allocation_is_reused(session_factory) -> None:
    async with session_factory() as session:
        assert await next_sales_order_no(session) == "SO-0001"
        await session.rollback()

    async with session_factory() as session:
        assert await next_sales_order_no(session) == "SO-0001"
