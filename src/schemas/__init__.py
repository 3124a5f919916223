from __future__ import annotations

from .common import (
    ErrorResponse,
    FulfillmentStatus,
    MessageResponse,
    PaginatedResponse,
    SalesOrderStatus,
    StockDirection,
    TimestampModel,
    UUIDModel,
)
from .health import DependencyHealth, HealthCheckResponse
from .item import ItemCreate, ItemRead, ItemUpdate
from .sales_order import (
    FileMeta,
    FulfillmentDetailsUpdate,
    FulfillmentEvent,
    FulfillmentRow,
    FulfillmentStatusUpdate,
    NextOrderNumber,
    SalesOrderInput,
    SalesOrderLine,
    SalesOrderRead,
    SalesOrderStatusUpdate,
    Totals,
)

__all__ = [
    # common
    "ErrorResponse",
    "FulfillmentStatus",
    "MessageResponse",
    "PaginatedResponse",
    "SalesOrderStatus",
    "StockDirection",
    "TimestampModel",
    "UUIDModel",
    # health
    "DependencyHealth",
    "HealthCheckResponse",
    # item
    "ItemCreate",
    "ItemRead",
    "ItemUpdate",
    # sales order
    "FileMeta",
    "FulfillmentDetailsUpdate",
    "FulfillmentEvent",
    "FulfillmentRow",
    "FulfillmentStatusUpdate",
    "NextOrderNumber",
    "SalesOrderInput",
    "SalesOrderLine",
    "SalesOrderRead",
    "SalesOrderStatusUpdate",
    "Totals",
]
