from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class Counter(Base):
    """Named monotonic sequence (e.g. the sales order number)."""

    __tablename__ = "counters"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, default=0)
