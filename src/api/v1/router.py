from __future__ import annotations

from fastapi import APIRouter

from src.api.v1 import (
    fulfillment,
    health,
    items,
    sales_orders,
)

api_v1_router = APIRouter()

api_v1_router.include_router(health.router, tags=["Health"])
api_v1_router.include_router(items.router, prefix="/items", tags=["Items"])
api_v1_router.include_router(
    sales_orders.router, prefix="/sales-orders", tags=["Sales Orders"]
)
api_v1_router.include_router(
    fulfillment.router, prefix="/fulfillment", tags=["Fulfillment"]
)
