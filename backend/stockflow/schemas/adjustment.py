"""Adjustment schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from stockflow.models.adjustment import AdjustmentReason
from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import Quantity
from stockflow.schemas.operation import OperationUpdateBase


class AdjustmentLineCreate(BaseModel):
    product_id: int
    counted_qty: Decimal = Field(ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class AdjustmentLineUpdate(BaseModel):
    counted_qty: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class AdjustmentLineResponse(BaseModel):
    id: int
    adjustment_id: int
    product_id: int
    counted_qty: Quantity
    recorded_qty: Optional[Quantity] = None
    delta_qty: Optional[Quantity] = None
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class AdjustmentCreate(BaseModel):
    reference: str = Field(min_length=1, max_length=50)
    warehouse_id: int
    reason: AdjustmentReason = AdjustmentReason.OTHER
    notes: Optional[str] = Field(default=None, max_length=1000)
    lines: List[AdjustmentLineCreate] = []


class AdjustmentUpdate(OperationUpdateBase):
    reason: Optional[AdjustmentReason] = None


class AdjustmentResponse(BaseModel):
    id: int
    reference: str
    warehouse_id: int
    reason: AdjustmentReason
    status: OperationStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    lines: List[AdjustmentLineResponse] = []

    model_config = {"from_attributes": True}


class AdjustmentReasonStats(BaseModel):
    """Applied adjustments per reason."""

    reason: AdjustmentReason
    count: int
    total_change: Quantity


class AdjustmentHistoryItem(BaseModel):
    """One applied adjustment line, flattened with its header."""

    adjustment_id: int
    reference: str
    product_id: int
    warehouse_id: int
    reason: AdjustmentReason
    recorded_qty: Quantity
    counted_qty: Quantity
    delta_qty: Quantity
    completed_at: Optional[datetime] = None
    created_by: Optional[int] = None
