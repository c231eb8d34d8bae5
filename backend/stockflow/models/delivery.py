"""Delivery (outgoing goods) models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base
from stockflow.models.operation import OperationMixin


class Delivery(Base, OperationMixin):
    """Goods shipped to a customer from one warehouse."""

    __tablename__ = "deliveries"

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    delivery_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    warehouse: Mapped["Warehouse"] = relationship("Warehouse")
    lines: Mapped[list["DeliveryLine"]] = relationship(
        "DeliveryLine", back_populates="delivery", cascade="all, delete-orphan",
        order_by="DeliveryLine.id",
    )


class DeliveryLine(Base):
    """A product on a delivery. ``qty_done`` is the picked quantity."""

    __tablename__ = "delivery_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    delivery_id: Mapped[int] = mapped_column(
        ForeignKey("deliveries.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    qty_ordered: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    qty_done: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    uom: Mapped[str] = mapped_column(String(20), default="pcs", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    delivery: Mapped["Delivery"] = relationship("Delivery", back_populates="lines")


# Forward references
from stockflow.models.warehouse import Warehouse
