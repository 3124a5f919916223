from __future__ import annotations

import json
import math
import uuid
from datetime import date, datetime
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
)

from src.core.config import settings

from .common import (
    FulfillmentStatus,
    SalesOrderStatus,
    TimestampModel,
    UUIDModel,
)


def to_number(value: Any) -> float:
    """Coerce form/JSON input to a finite float; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _non_negative(value: Any) -> float:
    return max(to_number(value), 0.0)


def _percent(value: Any) -> float:
    return min(max(to_number(value), 0.0), 100.0)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _strip(value: Any) -> Any:
    if value is None:
        return ""
    return value.strip() if isinstance(value, str) else value


Amount = Annotated[float, BeforeValidator(to_number)]
Quantity = Annotated[float, BeforeValidator(_non_negative)]
Percent = Annotated[float, BeforeValidator(_percent)]
OptionalUUID = Annotated[uuid.UUID | None, BeforeValidator(_blank_to_none)]
OptionalDate = Annotated[date | None, BeforeValidator(_blank_to_none)]
OptionalStr = Annotated[str | None, BeforeValidator(_blank_to_none)]
CleanStr = Annotated[str, BeforeValidator(_strip)]


class SalesOrderLine(BaseModel):
    model_config = ConfigDict(extra="ignore")

    item_id: OptionalUUID = None
    free_text: CleanStr = ""
    quantity: Quantity = 1
    rate: Quantity = 0
    discount: Percent = 0
    tax_id: OptionalStr = None


class Totals(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sub_total: Amount = 0
    tax_total: Amount = 0
    shipping_charge: Amount = 0
    adjustment: Amount = 0
    round_off: Amount = 0
    grand_total: Amount = 0
    currency: str = Field(default_factory=lambda: settings.default_currency)


class FileMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    size: int | None = None
    type: str | None = None
    url: str | None = None
    public_id: str | None = None


class SalesOrderInput(BaseModel):
    """Sanitized create/update payload.

    Nested collections may arrive as JSON-encoded strings (multipart form
    posts). Server-owned fields such as ``id``, ``uid``, status timestamps and
    fulfillment bookkeeping are dropped rather than rejected.
    """

    model_config = ConfigDict(extra="ignore")

    sales_order_no: CleanStr = ""
    reference_no: CleanStr = ""
    customer_id: OptionalUUID = None
    salesperson_id: CleanStr = ""
    price_list_id: CleanStr = ""
    sales_order_date: OptionalDate = None
    expected_shipment_date: OptionalDate = None
    payment_term: CleanStr = ""
    delivery_method: CleanStr = ""
    shipping_charge: Amount = 0
    shipping_tax_id: OptionalStr = None
    adjustment: Amount = 0
    round_off: Amount = 0
    items: list[SalesOrderLine] = Field(default_factory=list)
    totals: Totals | None = None
    notes: CleanStr = ""
    terms: CleanStr = ""
    files_meta: list[FileMeta] = Field(default_factory=list)
    status: CleanStr = SalesOrderStatus.DRAFT.value

    @field_validator("items", "files_meta", mode="before")
    @classmethod
    def parse_json_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            if not value.strip():
                return []
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError("must be a JSON array") from e
        return value

    @field_validator("totals", mode="before")
    @classmethod
    def parse_json_object(cls, value: Any) -> Any:
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                raise ValueError("must be a JSON object") from e
        return value

    def to_columns(self, *, only_set: bool = False) -> dict[str, Any]:
        """Column values for the order row, JSON documents ready to store.

        With ``only_set`` the result is limited to fields present in the
        original payload, for merging into an existing order.
        """
        data = self.model_dump(mode="json")
        # Dates and ids are real column types, not JSON
        for key in ("customer_id", "sales_order_date", "expected_shipment_date"):
            data[key] = getattr(self, key)
        if only_set:
            data = {k: v for k, v in data.items() if k in self.model_fields_set}
        data.pop("status", None)
        return data


class SalesOrderStatusUpdate(BaseModel):
    status: str = ""


class FulfillmentStatusUpdate(BaseModel):
    status: str = Field(default="", validation_alias=AliasChoices("status", "next"))


class FulfillmentDetailsUpdate(BaseModel):
    fulfillment_assignee: str | None = None
    fulfillment_notes: str | None = None


class FulfillmentEvent(BaseModel):
    at: datetime
    event: str


class SalesOrderRead(UUIDModel, TimestampModel):
    model_config = ConfigDict(from_attributes=True)

    uid: str
    sales_order_no: str
    reference_no: str
    customer_id: uuid.UUID | None = None
    salesperson_id: str
    price_list_id: str
    sales_order_date: date | None = None
    expected_shipment_date: date | None = None
    payment_term: str
    delivery_method: str
    shipping_charge: float
    shipping_tax_id: str | None = None
    adjustment: float
    round_off: float
    items: list[SalesOrderLine]
    totals: Totals | None = None
    notes: str
    terms: str
    files_meta: list[FileMeta]

    status: SalesOrderStatus
    confirmed_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    fulfillment_status: FulfillmentStatus
    fulfillment_assignee: str
    fulfillment_notes: str
    fulfillment_history: list[FulfillmentEvent]
    picked_at: datetime | None = None
    packed_at: datetime | None = None
    ready_at: datetime | None = None
    shipped_at: datetime | None = None


class FulfillmentRow(UUIDModel, TimestampModel):
    """Compact order projection for the packages board."""

    model_config = ConfigDict(from_attributes=True)

    sales_order_no: str
    reference_no: str
    status: SalesOrderStatus
    items_count: int
    total: float
    fulfillment_status: FulfillmentStatus
    fulfillment_assignee: str
    fulfillment_notes: str
    fulfillment_history: list[FulfillmentEvent]
    expected_shipment_date: date | None = None
    delivered_at: datetime | None = None


class NextOrderNumber(BaseModel):
    next_order_number: str
