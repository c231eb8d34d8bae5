"""Inter-warehouse transfer models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base
from stockflow.models.operation import OperationMixin


class Transfer(Base, OperationMixin):
    """Stock moved from one warehouse to another."""

    __tablename__ = "transfers"

    from_warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    to_warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Relationships
    from_warehouse: Mapped["Warehouse"] = relationship("Warehouse", foreign_keys=[from_warehouse_id])
    to_warehouse: Mapped["Warehouse"] = relationship("Warehouse", foreign_keys=[to_warehouse_id])
    lines: Mapped[list["TransferLine"]] = relationship(
        "TransferLine", back_populates="transfer", cascade="all, delete-orphan",
        order_by="TransferLine.id",
    )


class TransferLine(Base):
    """A product moved by a transfer. ``qty_done`` is the quantity actually moved."""

    __tablename__ = "transfer_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    transfer_id: Mapped[int] = mapped_column(
        ForeignKey("transfers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    qty_ordered: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    qty_done: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    uom: Mapped[str] = mapped_column(String(20), default="pcs", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    transfer: Mapped["Transfer"] = relationship("Transfer", back_populates="lines")


# Forward references
from stockflow.models.warehouse import Warehouse
