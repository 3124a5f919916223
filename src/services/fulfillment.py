from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import transaction
from src.models.sales_order import SalesOrder
from src.schemas.common import FulfillmentStatus, SalesOrderStatus
from src.schemas.sales_order import FulfillmentRow, to_number
from src.services.exceptions import NotEligibleForFulfillment
from src.services.order_status import parse_fulfillment_status
from src.services.sales_orders import load_sales_order, utcnow

logger = logging.getLogger(__name__)

FULFILLMENT_TIMESTAMPS = {
    FulfillmentStatus.PICKING: "picked_at",
    FulfillmentStatus.PACKING: "packed_at",
    FulfillmentStatus.READY: "ready_at",
    FulfillmentStatus.SHIPPED: "shipped_at",
    FulfillmentStatus.DELIVERED: "delivered_at",
}


def _ensure_eligible(order: SalesOrder) -> None:
    if order.status != SalesOrderStatus.CONFIRMED:
        raise NotEligibleForFulfillment(
            "Order is not eligible for packaging (must be confirmed)"
        )


def _record(order: SalesOrder, event: str, at: datetime) -> None:
    # Reassign so the JSON column is flagged dirty
    history: list[dict[str, Any]] = list(order.fulfillment_history or [])
    history.append({"at": at.isoformat(), "event": event})
    order.fulfillment_history = history


async def set_fulfillment_status(
    session: AsyncSession,
    order_id: uuid.UUID,
    status: str,
) -> SalesOrder:
    """Advance the packing/shipping status of a confirmed order. Stock is not touched."""
    target = parse_fulfillment_status(status)

    async with transaction(session):
        order = await load_sales_order(session, order_id)
        _ensure_eligible(order)

        previous = order.fulfillment_status or FulfillmentStatus.NEW.value
        if previous != target:
            now = utcnow()
            order.fulfillment_status = target.value
            _record(order, f"{previous} → {target}", now)

            field = FULFILLMENT_TIMESTAMPS.get(target)
            if field is not None and getattr(order, field) is None:
                setattr(order, field, now)
            if previous == FulfillmentStatus.DELIVERED:
                order.delivered_at = None
            await session.flush()

    await session.refresh(order)
    logger.info(f"Fulfillment of {order.sales_order_no}: {previous} -> {target}")
    return order


async def update_fulfillment_details(
    session: AsyncSession,
    order_id: uuid.UUID,
    *,
    assignee: str | None = None,
    notes: str | None = None,
) -> SalesOrder:
    async with transaction(session):
        order = await load_sales_order(session, order_id)
        _ensure_eligible(order)

        events = []
        if assignee is not None:
            order.fulfillment_assignee = assignee
            events.append(f"assignee → {assignee or '—'}")
        if notes is not None:
            order.fulfillment_notes = notes
            if notes:
                events.append("notes updated")
        if events:
            _record(order, "; ".join(events), utcnow())
        await session.flush()

    await session.refresh(order)
    return order


async def list_fulfillment_queue(
    session: AsyncSession,
    *,
    fulfillment_status: FulfillmentStatus | None = None,
    q: str | None = None,
    page: int = 1,
    page_size: int = 100,
) -> tuple[list[SalesOrder], int]:
    """Confirmed orders for the packages board, most recently touched first."""
    stmt = select(SalesOrder).where(SalesOrder.status == SalesOrderStatus.CONFIRMED.value)
    if fulfillment_status is not None:
        stmt = stmt.where(SalesOrder.fulfillment_status == fulfillment_status.value)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(
                SalesOrder.sales_order_no.ilike(pattern),
                SalesOrder.reference_no.ilike(pattern),
                SalesOrder.fulfillment_assignee.ilike(pattern),
            )
        )

    total = await session.scalar(select(func.count()).select_from(stmt.subquery())) or 0

    stmt = stmt.order_by(SalesOrder.updated_at.desc(), SalesOrder.sales_order_no.desc())
    stmt = stmt.offset((page - 1) * page_size).limit(page_size)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


def to_fulfillment_row(order: SalesOrder) -> FulfillmentRow:
    totals = order.totals or {}
    return FulfillmentRow(
        id=order.id,
        created_at=order.created_at,
        updated_at=order.updated_at,
        sales_order_no=order.sales_order_no,
        reference_no=order.reference_no,
        status=order.status,
        items_count=len(order.items or []),
        total=to_number(totals.get("grand_total")),
        fulfillment_status=order.fulfillment_status,
        fulfillment_assignee=order.fulfillment_assignee,
        fulfillment_notes=order.fulfillment_notes,
        fulfillment_history=order.fulfillment_history or [],
        expected_shipment_date=order.expected_shipment_date,
        delivered_at=order.delivered_at,
    )
