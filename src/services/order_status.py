"""Commercial status policy for sales orders.

Only ``confirmed`` holds stock against an order. ``delivered`` is terminal:
the goods have left, so nothing may move the order out of it, and it is only
reachable from ``confirmed``.

=============================  ==============
transition                     stock action
=============================  ==============
same status                    none
draft / cancelled → confirmed  decrease
confirmed → delivered          none
confirmed → cancelled / draft  increase
draft ↔ cancelled              none
delivered → anything else      rejected
draft / cancelled → delivered  rejected
=============================  ==============
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from src.models.sales_order import SalesOrder
from src.schemas.common import FulfillmentStatus, SalesOrderStatus, StockDirection
from src.services.exceptions import IllegalTransition, InvalidStatus, ValidationError

ORDER_STATUSES = [s.value for s in SalesOrderStatus]
FULFILLMENT_STATUSES = [s.value for s in FulfillmentStatus]

STATUS_TIMESTAMPS = {
    SalesOrderStatus.CONFIRMED: "confirmed_at",
    SalesOrderStatus.DELIVERED: "delivered_at",
    SalesOrderStatus.CANCELLED: "cancelled_at",
}


def parse_status(value: Any) -> SalesOrderStatus:
    text = str(value or "").strip().lower()
    if not text:
        raise ValidationError("status is required")
    try:
        return SalesOrderStatus(text)
    except ValueError:
        raise InvalidStatus(value, ORDER_STATUSES) from None


def parse_fulfillment_status(value: Any) -> FulfillmentStatus:
    text = str(value or "").strip().lower()
    if not text:
        raise ValidationError("status is required")
    try:
        return FulfillmentStatus(text)
    except ValueError:
        raise InvalidStatus(value, FULFILLMENT_STATUSES) from None


def holds_stock(status: str) -> bool:
    return status == SalesOrderStatus.CONFIRMED


def consumes_stock(current: str, target: str) -> bool:
    """Whether an order in ``target`` still accounts for its lines in stock.

    True while confirmed, and on delivery of a confirmed order.
    """
    if holds_stock(target):
        return True
    return target == SalesOrderStatus.DELIVERED and holds_stock(current)


def plan_transition(current: str, target: SalesOrderStatus) -> StockDirection | None:
    """Stock movement required to move an order from ``current`` to ``target``.

    Raises ``IllegalTransition`` for moves the policy does not allow.
    """
    if current == target:
        return None
    if current == SalesOrderStatus.DELIVERED:
        raise IllegalTransition(current, target)
    if target == SalesOrderStatus.DELIVERED:
        if current != SalesOrderStatus.CONFIRMED:
            raise IllegalTransition(current, target)
        # Goods left with the held stock; it stays consumed
        return None

    if target == SalesOrderStatus.CONFIRMED:
        return StockDirection.DECREASE
    if current == SalesOrderStatus.CONFIRMED:
        return StockDirection.INCREASE
    return None


def stamp_status(order: SalesOrder, status: SalesOrderStatus, now: datetime) -> None:
    """Record first entry into ``status``; later entries keep the original time."""
    field = STATUS_TIMESTAMPS.get(status)
    if field is not None and getattr(order, field) is None:
        setattr(order, field, now)
