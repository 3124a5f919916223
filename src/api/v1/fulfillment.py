from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query

from src.api.deps import DbSession, throttle_writes
from src.schemas import (
    FulfillmentDetailsUpdate,
    FulfillmentRow,
    FulfillmentStatus,
    FulfillmentStatusUpdate,
    PaginatedResponse,
)
from src.services import fulfillment as service

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[FulfillmentRow])
async def list_fulfillment_queue(
    db: DbSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(100, ge=1, le=500),
    fulfillment_status: FulfillmentStatus | None = None,
    q: str | None = None,
) -> PaginatedResponse[FulfillmentRow]:
    """Confirmed orders awaiting or going through packing and shipping."""
    orders, total = await service.list_fulfillment_queue(
        db,
        fulfillment_status=fulfillment_status,
        q=q,
        page=page,
        page_size=page_size,
    )
    return PaginatedResponse[FulfillmentRow](
        items=[service.to_fulfillment_row(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        pages=(total + page_size - 1) // page_size if total > 0 else 0,
    )


@router.patch(
    "/{order_id}/status",
    response_model=FulfillmentRow,
    dependencies=[Depends(throttle_writes)],
)
async def set_fulfillment_status(
    order_id: uuid.UUID,
    body: FulfillmentStatusUpdate,
    db: DbSession,
) -> FulfillmentRow:
    order = await service.set_fulfillment_status(db, order_id, body.status)
    return service.to_fulfillment_row(order)


@router.patch(
    "/{order_id}",
    response_model=FulfillmentRow,
    dependencies=[Depends(throttle_writes)],
)
async def update_fulfillment_details(
    order_id: uuid.UUID,
    body: FulfillmentDetailsUpdate,
    db: DbSession,
) -> FulfillmentRow:
    """Set the packer assigned to an order and packing notes."""
    order = await service.update_fulfillment_details(
        db,
        order_id,
        assignee=body.fulfillment_assignee,
        notes=body.fulfillment_notes,
    )
    return service.to_fulfillment_row(order)
