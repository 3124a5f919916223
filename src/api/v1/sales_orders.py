from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status

from src.api.deps import DbSession, throttle_writes
from src.schemas import (
    MessageResponse,
    NextOrderNumber,
    PaginatedResponse,
    SalesOrderInput,
    SalesOrderRead,
    SalesOrderStatus,
    SalesOrderStatusUpdate,
)
from src.services import sales_orders as service
from src.services.numbering import peek_sales_order_no

router = APIRouter()


@router.get("/next-order-number", response_model=NextOrderNumber)
async def get_next_order_number(db: DbSession) -> NextOrderNumber:
    """Preview the number the next automatically numbered order will get."""
    return NextOrderNumber(next_order_number=await peek_sales_order_no(db))


@router.get("/", response_model=PaginatedResponse[SalesOrderRead])
async def list_sales_orders(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: SalesOrderStatus | None = None,
    customer_id: uuid.UUID | None = None,
    q: str | None = None,
) -> PaginatedResponse[SalesOrderRead]:
    """List sales orders, newest first."""
    orders, total = await service.list_sales_orders(
        db,
        status=status,
        customer_id=customer_id,
        q=q,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse[SalesOrderRead](
        items=[SalesOrderRead.model_validate(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size if total > 0 else 0,
    )


@router.post(
    "/",
    response_model=SalesOrderRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(throttle_writes)],
)
async def create_sales_order(body: SalesOrderInput, db: DbSession) -> SalesOrderRead:
    """Create a sales order. Confirmed orders take stock immediately."""
    order = await service.create_sales_order(db, body)
    return SalesOrderRead.model_validate(order)


@router.get("/{order_id}", response_model=SalesOrderRead)
async def get_sales_order(order_id: uuid.UUID, db: DbSession) -> SalesOrderRead:
    order = await service.get_sales_order(db, order_id)
    return SalesOrderRead.model_validate(order)


@router.put(
    "/{order_id}",
    response_model=SalesOrderRead,
    dependencies=[Depends(throttle_writes)],
)
@router.patch(
    "/{order_id}",
    response_model=SalesOrderRead,
    dependencies=[Depends(throttle_writes)],
)
async def update_sales_order(
    order_id: uuid.UUID,
    body: SalesOrderInput,
    db: DbSession,
) -> SalesOrderRead:
    """Update order fields; stock held by a confirmed order follows its lines."""
    order = await service.update_sales_order(db, order_id, body)
    return SalesOrderRead.model_validate(order)


@router.delete(
    "/{order_id}",
    response_model=MessageResponse,
    dependencies=[Depends(throttle_writes)],
)
async def delete_sales_order(order_id: uuid.UUID, db: DbSession) -> MessageResponse:
    await service.delete_sales_order(db, order_id)
    return MessageResponse(message="Sales order deleted successfully")


@router.patch(
    "/{order_id}/status",
    response_model=SalesOrderRead,
    dependencies=[Depends(throttle_writes)],
)
async def set_sales_order_status(
    order_id: uuid.UUID,
    body: SalesOrderStatusUpdate,
    db: DbSession,
) -> SalesOrderRead:
    """Move an order between draft, confirmed, delivered and cancelled."""
    order = await service.set_sales_order_status(db, order_id, body.status)
    return SalesOrderRead.model_validate(order)
