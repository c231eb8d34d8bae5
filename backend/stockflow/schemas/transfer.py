"""Transfer schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import Quantity
from stockflow.schemas.operation import OperationUpdateBase


class TransferLineCreate(BaseModel):
    product_id: int
    qty_ordered: Decimal = Field(gt=0)
    uom: str = Field(default="pcs", min_length=1, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=500)


class TransferLineUpdate(BaseModel):
    qty_ordered: Optional[Decimal] = Field(default=None, gt=0)
    qty_done: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class TransferLineResponse(BaseModel):
    id: int
    transfer_id: int
    product_id: int
    qty_ordered: Quantity
    qty_done: Optional[Quantity] = None
    uom: str
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class TransferCreate(BaseModel):
    reference: str = Field(min_length=1, max_length=50)
    from_warehouse_id: int
    to_warehouse_id: int
    scheduled_date: Optional[date] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    lines: List[TransferLineCreate] = []

    @model_validator(mode="after")
    def warehouses_differ(self) -> "TransferCreate":
        if self.from_warehouse_id == self.to_warehouse_id:
            raise ValueError("from_warehouse_id and to_warehouse_id must differ")
        return self


class TransferUpdate(OperationUpdateBase):
    from_warehouse_id: Optional[int] = None
    to_warehouse_id: Optional[int] = None
    scheduled_date: Optional[date] = None


class TransferResponse(BaseModel):
    id: int
    reference: str
    from_warehouse_id: int
    to_warehouse_id: int
    scheduled_date: Optional[date] = None
    status: OperationStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    lines: List[TransferLineResponse] = []

    model_config = {"from_attributes": True}
