"""Warehouse model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base, TimestampMixin


class Warehouse(Base, TimestampMixin):
    """Physical warehouse holding stock."""

    __tablename__ = "warehouses"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, unique=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    stock_on_hand: Mapped[list["StockOnHand"]] = relationship(
        "StockOnHand", back_populates="warehouse"
    )
    ledger_entries: Mapped[list["StockLedgerEntry"]] = relationship(
        "StockLedgerEntry", back_populates="warehouse"
    )


# Forward references
from stockflow.models.stock import StockOnHand, StockLedgerEntry
