"""Stock models: the StockOnHand balance projection and the StockLedgerEntry ledger."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, event, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.core.exceptions import ImmutableRecordError
from stockflow.db.base import Base


class MovementType(str, Enum):
    """Kinds of quantity-changing events recorded in the ledger."""

    RECEIPT = "receipt"  # Goods received from a supplier
    DELIVERY = "delivery"  # Goods shipped to a customer
    TRANSFER_IN = "transfer_in"  # Arrival from another warehouse
    TRANSFER_OUT = "transfer_out"  # Departure to another warehouse
    ADJUSTMENT = "adjustment"  # Counted minus recorded


class StockOnHand(Base):
    """Current stock level per product per warehouse."""

    __tablename__ = "stock_on_hand"
    __table_args__ = (
        UniqueConstraint("product_id", "warehouse_id", name="uq_stock_product_warehouse"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    qty: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    reserved_qty: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=0, nullable=False, server_default="0"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="stock_on_hand")
    warehouse: Mapped["Warehouse"] = relationship("Warehouse", back_populates="stock_on_hand")

    @property
    def available_qty(self) -> Decimal:
        return (self.qty or Decimal("0")) - (self.reserved_qty or Decimal("0"))


class StockLedgerEntry(Base):
    """Append-only ledger of all stock changes.

    The sum of ``qty_delta`` for a (product, warehouse) pair always equals
    that pair's ``StockOnHand.qty``.
    """

    __tablename__ = "stock_ledger"

    id: Mapped[int] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    qty_delta: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    movement_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    ref_type: Mapped[str] = mapped_column(String(20), nullable=False)  # receipt, delivery, transfer, adjustment
    ref_id: Mapped[int] = mapped_column(Integer, nullable=False)
    reference_number: Mapped[str] = mapped_column(String(50), nullable=False, index=True)  # e.g. RCP-12
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Relationships
    product: Mapped["Product"] = relationship("Product", back_populates="ledger_entries")
    warehouse: Mapped["Warehouse"] = relationship("Warehouse", back_populates="ledger_entries")


@event.listens_for(StockLedgerEntry, "before_update")
def prevent_ledger_update(mapper, connection, target):
    """Ledger rows are never modified; corrections are new adjustment rows."""
    raise ImmutableRecordError("Ledger entry", target.id, "modified")


@event.listens_for(StockLedgerEntry, "before_delete")
def prevent_ledger_delete(mapper, connection, target):
    raise ImmutableRecordError("Ledger entry", target.id, "deleted")


# Forward references
from stockflow.models.product import Product
from stockflow.models.warehouse import Warehouse
