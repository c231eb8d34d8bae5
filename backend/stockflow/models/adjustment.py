"""Stock adjustment (physical count correction) models."""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Optional

from sqlalchemy import Enum as SQLEnum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockflow.db.base import Base
from stockflow.models.operation import OperationMixin


class AdjustmentReason(str, Enum):
    """Why recorded stock differs from the physical count."""

    DAMAGE = "damage"
    LOSS = "loss"
    SURPLUS = "surplus"
    DISCREPANCY = "discrepancy"
    RECOUNT = "recount"
    CORRECTION = "correction"
    OTHER = "other"


class Adjustment(Base, OperationMixin):
    """A count of one or more products in a warehouse."""

    __tablename__ = "adjustments"

    warehouse_id: Mapped[int] = mapped_column(
        ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    reason: Mapped[AdjustmentReason] = mapped_column(
        SQLEnum(AdjustmentReason), default=AdjustmentReason.OTHER, nullable=False, index=True
    )

    # Relationships
    warehouse: Mapped["Warehouse"] = relationship("Warehouse")
    lines: Mapped[list["AdjustmentLine"]] = relationship(
        "AdjustmentLine", back_populates="adjustment", cascade="all, delete-orphan",
        order_by="AdjustmentLine.id",
    )


class AdjustmentLine(Base):
    """Counted quantity for one product.

    ``recorded_qty`` and ``delta_qty`` are snapshotted when the adjustment is applied.
    """

    __tablename__ = "adjustment_lines"

    id: Mapped[int] = mapped_column(primary_key=True)
    adjustment_id: Mapped[int] = mapped_column(
        ForeignKey("adjustments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    counted_qty: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    recorded_qty: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    delta_qty: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Relationships
    adjustment: Mapped["Adjustment"] = relationship("Adjustment", back_populates="lines")


# Forward references
from stockflow.models.warehouse import Warehouse
