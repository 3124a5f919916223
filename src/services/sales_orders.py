from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.database import transaction
from src.models.sales_order import SalesOrder
from src.schemas.common import SalesOrderStatus, StockDirection
from src.schemas.sales_order import SalesOrderInput
from src.services.exceptions import DuplicateKey, NotFound, ValidationError
from src.services.numbering import next_sales_order_no, reserve_sales_order_no
from src.services.order_status import (
    consumes_stock,
    holds_stock,
    parse_status,
    plan_transition,
    stamp_status,
)
from src.services.quantities import build_quantity_map
from src.services.stock import apply_stock_change, reconcile_holdings

logger = logging.getLogger(__name__)

CREATABLE_STATUSES = (SalesOrderStatus.DRAFT, SalesOrderStatus.CONFIRMED)


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_uid() -> str:
    return f"so_{uuid.uuid4().hex}"


async def load_sales_order(
    session: AsyncSession,
    order_id: uuid.UUID,
    *,
    for_update: bool = True,
) -> SalesOrder:
    stmt = select(SalesOrder).where(SalesOrder.id == order_id)
    if for_update:
        stmt = stmt.with_for_update()
    stmt = stmt.execution_options(populate_existing=True)
    order = (await session.execute(stmt)).scalar_one_or_none()
    if order is None:
        raise NotFound("Sales order not found")
    return order


async def _number_taken(
    session: AsyncSession,
    number: str,
    exclude_id: uuid.UUID | None = None,
) -> bool:
    stmt = select(SalesOrder.id).where(SalesOrder.sales_order_no == number)
    if exclude_id is not None:
        stmt = stmt.where(SalesOrder.id != exclude_id)
    return await session.scalar(stmt) is not None


async def _flush_order(session: AsyncSession, order: SalesOrder) -> None:
    """Flush, turning unique-constraint violations into ``DuplicateKey``."""
    try:
        await session.flush()
    except IntegrityError as e:
        message = str(e.orig).lower()
        if "unique" not in message and "duplicate" not in message:
            raise
        if "uid" in message:
            raise DuplicateKey("uid", order.uid) from e
        raise DuplicateKey("sales_order_no", order.sales_order_no) from e


async def create_sales_order(session: AsyncSession, data: SalesOrderInput) -> SalesOrder:
    """Persist a new order; a confirmed order takes its stock immediately."""
    status = parse_status(data.status)
    if status not in CREATABLE_STATUSES:
        raise ValidationError("New sales orders must be draft or confirmed")

    columns = data.to_columns()
    number = columns.pop("sales_order_no")

    async with transaction(session):
        if number:
            if await _number_taken(session, number):
                raise DuplicateKey("sales_order_no", number)
            await reserve_sales_order_no(session, number)
        else:
            number = await next_sales_order_no(session)
            while await _number_taken(session, number):
                number = await next_sales_order_no(session)

        order = SalesOrder(
            uid=new_uid(),
            sales_order_no=number,
            status=status.value,
            fulfillment_status="new",
            fulfillment_assignee="",
            fulfillment_notes="",
            fulfillment_history=[],
            **columns,
        )
        session.add(order)
        await _flush_order(session, order)

        if holds_stock(status):
            await apply_stock_change(
                session, build_quantity_map(order.items), StockDirection.DECREASE
            )
        stamp_status(order, status, utcnow())

    await session.refresh(order)
    logger.info(f"Created sales order {order.sales_order_no} ({order.status})")
    return order


async def update_sales_order(
    session: AsyncSession,
    order_id: uuid.UUID,
    data: SalesOrderInput,
) -> SalesOrder:
    """Merge ``data`` into an order and re-balance the stock it holds."""
    target = parse_status(data.status) if "status" in data.model_fields_set else None
    changes = data.to_columns(only_set=True)
    number = changes.pop("sales_order_no", "")

    async with transaction(session):
        order = await load_sales_order(session, order_id)
        current = order.status
        if target is not None:
            plan_transition(current, target)
        next_status = target.value if target is not None else current

        held = build_quantity_map(order.items) if holds_stock(current) else {}

        if number and number != order.sales_order_no:
            if await _number_taken(session, number, exclude_id=order.id):
                raise DuplicateKey("sales_order_no", number)
            await reserve_sales_order_no(session, number)
            order.sales_order_no = number
        for field, value in changes.items():
            setattr(order, field, value)

        required = (
            build_quantity_map(order.items) if consumes_stock(current, next_status) else {}
        )
        await reconcile_holdings(session, held, required)

        order.status = next_status
        if target is not None:
            stamp_status(order, target, utcnow())
        await _flush_order(session, order)

    await session.refresh(order)
    logger.info(f"Updated sales order {order.sales_order_no} ({order.status})")
    return order


async def delete_sales_order(session: AsyncSession, order_id: uuid.UUID) -> None:
    """Remove an order, giving back any stock it holds first."""
    async with transaction(session):
        order = await load_sales_order(session, order_id)
        if holds_stock(order.status):
            await apply_stock_change(
                session, build_quantity_map(order.items), StockDirection.INCREASE
            )
        number = order.sales_order_no
        await session.delete(order)

    logger.info(f"Deleted sales order {number}")


async def set_sales_order_status(
    session: AsyncSession,
    order_id: uuid.UUID,
    status: str,
) -> SalesOrder:
    """Move an order to ``status``, taking or releasing stock as required.

    Re-applying the current status changes nothing.
    """
    target = parse_status(status)

    async with transaction(session):
        order = await load_sales_order(session, order_id)
        previous = order.status
        action = plan_transition(previous, target)

        if previous != target:
            if action is not None:
                await apply_stock_change(session, build_quantity_map(order.items), action)
            order.status = target.value
            stamp_status(order, target, utcnow())
            await session.flush()

    await session.refresh(order)
    if previous != target:
        logger.info(f"Sales order {order.sales_order_no}: {previous} -> {target}")
    return order


async def get_sales_order(session: AsyncSession, order_id: uuid.UUID) -> SalesOrder:
    return await load_sales_order(session, order_id, for_update=False)


async def list_sales_orders(
    session: AsyncSession,
    *,
    status: SalesOrderStatus | None = None,
    customer_id: uuid.UUID | None = None,
    q: str | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[SalesOrder], int]:
    """Newest orders first, with the total count before pagination."""
    stmt = select(SalesOrder)
    if status is not None:
        stmt = stmt.where(SalesOrder.status == status.value)
    if customer_id is not None:
        stmt = stmt.where(SalesOrder.customer_id == customer_id)
    if q:
        pattern = f"%{q}%"
        stmt = stmt.where(
            or_(
                SalesOrder.sales_order_no.ilike(pattern),
                SalesOrder.reference_no.ilike(pattern),
            )
        )

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = await session.scalar(count_stmt) or 0

    stmt = stmt.order_by(SalesOrder.created_at.desc(), SalesOrder.sales_order_no.desc())
    stmt = stmt.offset((page - 1) * page_size).limit(page_size)
    result = await session.execute(stmt)
    return list(result.scalars().all()), total
