"""Product model."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    """Product in the catalog. Owned by the catalog service; the ledger only references it."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sku: Mapped[Optional[str]] = mapped_column(String(50), unique=True, index=True, nullable=True)
    unit: Mapped[str] = mapped_column(String(20), default="pcs", nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    stock_on_hand: Mapped[list["StockOnHand"]] = relationship(
        "StockOnHand", back_populates="product"
    )
    ledger_entries: Mapped[list["StockLedgerEntry"]] = relationship(
        "StockLedgerEntry", back_populates="product"
    )


# Forward references
from stockflow.models.stock import StockOnHand, StockLedgerEntry
