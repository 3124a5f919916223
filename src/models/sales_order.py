from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any

from sqlalchemy import JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class SalesOrder(UUIDMixin, TimestampMixin, Base):
    """A customer sales order and its commercial and fulfillment state.

    Line items, totals and attachment metadata are owned by the order and
    stored as JSON documents on the row.
    """

    __tablename__ = "sales_orders"

    uid: Mapped[str] = mapped_column(String, unique=True, index=True)
    sales_order_no: Mapped[str] = mapped_column(String, unique=True, index=True)
    reference_no: Mapped[str] = mapped_column(String, default="")

    # Relations owned by other services, referenced by id only
    customer_id: Mapped[uuid.UUID | None] = mapped_column(index=True, default=None)
    salesperson_id: Mapped[str] = mapped_column(String, default="")
    price_list_id: Mapped[str] = mapped_column(String, default="")

    sales_order_date: Mapped[date | None] = mapped_column(default=None)
    expected_shipment_date: Mapped[date | None] = mapped_column(default=None)

    payment_term: Mapped[str] = mapped_column(String, default="")
    delivery_method: Mapped[str] = mapped_column(String, default="")
    shipping_charge: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    shipping_tax_id: Mapped[str | None] = mapped_column(String, default=None)
    adjustment: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    round_off: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)

    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    totals: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, default=None)

    notes: Mapped[str] = mapped_column(Text, default="")
    terms: Mapped[str] = mapped_column(Text, default="")
    files_meta: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Commercial lifecycle
    status: Mapped[str] = mapped_column(String, index=True, default="draft")
    confirmed_at: Mapped[datetime | None] = mapped_column(default=None)
    delivered_at: Mapped[datetime | None] = mapped_column(default=None)
    cancelled_at: Mapped[datetime | None] = mapped_column(default=None)

    # Fulfillment lifecycle
    fulfillment_status: Mapped[str] = mapped_column(String, index=True, default="new")
    fulfillment_assignee: Mapped[str] = mapped_column(String, default="")
    fulfillment_notes: Mapped[str] = mapped_column(Text, default="")
    fulfillment_history: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    picked_at: Mapped[datetime | None] = mapped_column(default=None)
    packed_at: Mapped[datetime | None] = mapped_column(default=None)
    ready_at: Mapped[datetime | None] = mapped_column(default=None)
    shipped_at: Mapped[datetime | None] = mapped_column(default=None)
