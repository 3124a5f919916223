from __future__ import annotations

import re

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.models.counter import Counter

SALES_ORDER_COUNTER = "salesOrder"


def format_order_no(seq: int) -> str:
    return f"{settings.order_number_prefix}-{seq:0{settings.order_number_width}d}"


def parse_order_no(number: str) -> int | None:
    """Sequence part of a ``PREFIX-NNNN`` number, or None for other shapes."""
    match = re.fullmatch(rf"{re.escape(settings.order_number_prefix)}-(\d+)", number.strip())
    return int(match.group(1)) if match else None


async def _lock_counter(session: AsyncSession, key: str) -> Counter:
    stmt = (
        select(Counter)
        .where(Counter.key == key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    counter = (await session.execute(stmt)).scalar_one_or_none()
    if counter is None:
        counter = Counter(key=key, seq=0)
        session.add(counter)
    return counter


async def next_sales_order_no(session: AsyncSession) -> str:
    """Allocate the next order number inside the caller's transaction."""
    counter = await _lock_counter(session, SALES_ORDER_COUNTER)
    counter.seq = (counter.seq or 0) + 1
    await session.flush()
    return format_order_no(counter.seq)


async def peek_sales_order_no(session: AsyncSession) -> str:
    """The number ``next_sales_order_no`` would hand out, without taking it."""
    seq = await session.scalar(
        select(Counter.seq).where(Counter.key == SALES_ORDER_COUNTER)
    )
    return format_order_no((seq or 0) + 1)


async def reserve_sales_order_no(session: AsyncSession, number: str) -> None:
    """Advance the counter past a client-chosen number of the standard shape."""
    seq = parse_order_no(number)
    if seq is None:
        return
    counter = await _lock_counter(session, SALES_ORDER_COUNTER)
    if (counter.seq or 0) < seq:
        counter.seq = seq
        await session.flush()
