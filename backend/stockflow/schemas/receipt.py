"""Receipt schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import Quantity
from stockflow.schemas.operation import OperationUpdateBase


class ReceiptLineCreate(BaseModel):
    """Receipt line creation schema."""

    product_id: int
    qty_ordered: Decimal = Field(gt=0)
    uom: str = Field(default="pcs", min_length=1, max_length=20)
    unit_cost: Decimal = Field(default=Decimal("0"), ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class ReceiptLineUpdate(BaseModel):
    """Receipt line update schema. ``qty_done`` is the received quantity."""

    qty_ordered: Optional[Decimal] = Field(default=None, gt=0)
    qty_done: Optional[Decimal] = Field(default=None, ge=0)
    unit_cost: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class ReceiptLineResponse(BaseModel):
    id: int
    receipt_id: int
    product_id: int
    qty_ordered: Quantity
    qty_done: Optional[Quantity] = None
    uom: str
    unit_cost: Quantity
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class ReceiptCreate(BaseModel):
    """Receipt creation schema. Receipts always start in draft."""

    reference: str = Field(min_length=1, max_length=50)
    warehouse_id: int
    supplier_name: Optional[str] = Field(default=None, max_length=255)
    expected_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    lines: List[ReceiptLineCreate] = []


class ReceiptUpdate(OperationUpdateBase):
    supplier_name: Optional[str] = Field(default=None, max_length=255)
    expected_date: Optional[date] = None


class ReceiptResponse(BaseModel):
    id: int
    reference: str
    warehouse_id: int
    supplier_name: Optional[str] = None
    expected_date: Optional[date] = None
    status: OperationStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    lines: List[ReceiptLineResponse] = []

    model_config = {"from_attributes": True}
