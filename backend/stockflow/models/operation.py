"""Shared lifecycle columns for stock operations (receipts, deliveries, transfers, adjustments)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Enum as SQLEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from stockflow.db.base import TimestampMixin


class OperationStatus(str, Enum):
    """Status of a stock operation.

    draft -> waiting/ready -> done, or -> canceled. done and canceled are terminal.
    """

    DRAFT = "draft"
    WAITING = "waiting"
    READY = "ready"
    DONE = "done"
    CANCELED = "canceled"


OPEN_STATUSES = (OperationStatus.DRAFT, OperationStatus.WAITING, OperationStatus.READY)


class OperationMixin(TimestampMixin):
    """Header columns common to every operation type."""

    id: Mapped[int] = mapped_column(primary_key=True)
    reference: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    status: Mapped[OperationStatus] = mapped_column(
        SQLEnum(OperationStatus), default=OperationStatus.DRAFT, nullable=False, index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES
