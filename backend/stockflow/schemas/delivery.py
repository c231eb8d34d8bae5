"""Delivery schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import Quantity
from stockflow.schemas.operation import OperationUpdateBase


class DeliveryLineCreate(BaseModel):
    product_id: int
    qty_ordered: Decimal = Field(gt=0)
    uom: str = Field(default="pcs", min_length=1, max_length=20)
    notes: Optional[str] = Field(default=None, max_length=500)


class DeliveryLineUpdate(BaseModel):
    """Delivery line update schema. ``qty_done`` is the picked quantity."""

    qty_ordered: Optional[Decimal] = Field(default=None, gt=0)
    qty_done: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)


class DeliveryLineResponse(BaseModel):
    id: int
    delivery_id: int
    product_id: int
    qty_ordered: Quantity
    qty_done: Optional[Quantity] = None
    uom: str
    notes: Optional[str] = None

    model_config = {"from_attributes": True}


class DeliveryCreate(BaseModel):
    reference: str = Field(min_length=1, max_length=50)
    warehouse_id: int
    customer_name: Optional[str] = Field(default=None, max_length=255)
    scheduled_date: Optional[date] = None
    delivery_address: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    lines: List[DeliveryLineCreate] = []


class DeliveryUpdate(OperationUpdateBase):
    customer_name: Optional[str] = Field(default=None, max_length=255)
    scheduled_date: Optional[date] = None
    delivery_address: Optional[str] = Field(default=None, max_length=500)


class DeliveryResponse(BaseModel):
    id: int
    reference: str
    warehouse_id: int
    customer_name: Optional[str] = None
    scheduled_date: Optional[date] = None
    delivery_address: Optional[str] = None
    status: OperationStatus
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    completed_at: Optional[datetime] = None
    lines: List[DeliveryLineResponse] = []

    model_config = {"from_attributes": True}
