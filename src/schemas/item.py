from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import TimestampModel, UUIDModel


class ItemCreate(BaseModel):
    name: str = Field(min_length=1)
    sku: str | None = None
    type: str = "goods"
    unit: str = "pcs"
    price: float = Field(default=0, ge=0)
    stock: int = Field(default=0, ge=0)  # opening balance only


class ItemUpdate(BaseModel):
    """Editable item fields; stock only moves through order reconciliation."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1)
    sku: str | None = None
    type: str | None = None
    unit: str | None = None
    price: float | None = Field(default=None, ge=0)

    @field_validator("name", "type", "unit", "price")
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; only sku may be cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ItemRead(UUIDModel, TimestampModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    sku: str | None = None
    type: str
    unit: str
    price: float
    stock: int
