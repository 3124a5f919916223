from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.item import Item
from src.schemas.common import StockDirection
from src.services.exceptions import (
    InsufficientStock,
    ItemNotFound,
    ValidationError,
)
from src.services.quantities import diff_quantity_maps, split_delta

logger = logging.getLogger(__name__)


async def lock_item(session: AsyncSession, item_id: str) -> Item | None:
    """Load an item row for update inside the session's transaction."""
    try:
        key = uuid.UUID(str(item_id))
    except ValueError:
        return None

    stmt = (
        select(Item)
        .where(Item.id == key)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def _whole_units(item_id: str, quantity: float) -> int:
    units = int(quantity)
    if units != quantity:
        raise ValidationError(
            f"Quantity {quantity} for item {item_id} is not a whole number of units"
        )
    return units


async def apply_stock_change(
    session: AsyncSession,
    quantities: Mapping[str, float],
    direction: StockDirection,
) -> None:
    """Move stock for every item in ``quantities`` in one direction.

    All rows are locked and checked before any of them is written, so a
    failure leaves every item untouched. Writes are flushed but not
    committed; the caller's transaction decides.
    """
    planned: list[tuple[Item, int]] = []

    # Phase 1: lock and validate
    for item_id, quantity in sorted(quantities.items()):
        if quantity <= 0:
            continue
        units = _whole_units(item_id, quantity)
        item = await lock_item(session, item_id)
        if item is None:
            raise ItemNotFound(item_id)

        available = item.stock or 0
        if direction is StockDirection.DECREASE and available < units:
            logger.warning(
                f"Insufficient stock for item {item_id}: "
                f"available {available}, requested {units}"
            )
            raise InsufficientStock(str(item.id), item.name, available, units)
        planned.append((item, units))

    # Phase 2: mutate
    for item, units in planned:
        if direction is StockDirection.DECREASE:
            item.stock = (item.stock or 0) - units
        else:
            item.stock = (item.stock or 0) + units

    if planned:
        await session.flush()
        logger.info(f"Stock {direction.value} applied to {len(planned)} item(s)")


async def lock_items(session: AsyncSession, item_ids: Iterable[str]) -> None:
    """Lock rows in sorted id order; unknown ids are left for the applier to report."""
    for item_id in sorted(set(item_ids)):
        await lock_item(session, item_id)


async def reconcile_holdings(
    session: AsyncSession,
    held: Mapping[str, float],
    required: Mapping[str, float],
) -> None:
    """Bring stock held against an order from ``held`` to ``required``.

    Every touched row is locked up front in one sorted pass, then releases
    run before new holds. The delta nets per item, so an item is never in
    both batches.
    """
    to_decrease, to_increase = split_delta(diff_quantity_maps(held, required))
    await lock_items(session, [*to_increase, *to_decrease])
    if to_increase:
        await apply_stock_change(session, to_increase, StockDirection.INCREASE)
    if to_decrease:
        await apply_stock_change(session, to_decrease, StockDirection.DECREASE)
