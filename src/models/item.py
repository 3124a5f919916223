from __future__ import annotations

from sqlalchemy import CheckConstraint, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base, TimestampMixin, UUIDMixin


class Item(UUIDMixin, TimestampMixin, Base):
    """A sellable, stockable product.

    ``stock`` is only moved by sales-order reconciliation once the item exists.
    """

    __tablename__ = "items"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_items_stock_non_negative"),)

    name: Mapped[str] = mapped_column(String, index=True)
    sku: Mapped[str | None] = mapped_column(String, unique=True, default=None)
    type: Mapped[str] = mapped_column(String, default="goods")
    unit: Mapped[str] = mapped_column(String, default="pcs")
    price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), default=0)
    stock: Mapped[int] = mapped_column(Integer, default=0)
