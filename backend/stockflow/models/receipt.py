"""Receipt (incoming goods) models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base
from stockflow.models.operation import OperationMixin


class Receipt(Base, OperationMixin):
    """Goods expected from a supplier into one warehouse."""

    __tablename__ = "receipts"

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    supplier_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    expected_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Relationships
    warehouse: Mapped["Warehouse"] = relationship("Warehouse")
    lines: Mapped[list["ReceiptLine"]] = relationship(
        "ReceiptLine", back_populates="receipt", cascade="all, delete-orphan",
        order_by="ReceiptLine.id",
    )


class ReceiptLine(Base):
    """A product expected on a receipt. ``qty_done`` is the quantity actually received."""

    __tablename__ = "receipt_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    receipt_id: Mapped[int] = mapped_column(
        ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    qty_ordered: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    qty_done: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    uom: Mapped[str] = mapped_column(String(20), default="pcs", nullable=False)
    unit_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    receipt: Mapped["Receipt"] = relationship("Receipt", back_populates="lines")


# Forward references
from stockflow.models.warehouse import Warehouse
