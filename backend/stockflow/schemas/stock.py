"""Stock balance and ledger schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import Quantity


class StockBalanceResponse(BaseModel):
    """Current on-hand quantity for a (product, warehouse) pair."""

    id: int
    product_id: int
    warehouse_id: int
    quantity: Quantity = Field(validation_alias="qty")
    reserved: Quantity = Field(validation_alias="reserved_qty")
    available: Quantity = Field(validation_alias="available_qty")
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProductStockResponse(BaseModel):
    """Balances of one product across warehouses."""

    product_id: int
    total_quantity: Quantity
    balances: List[StockBalanceResponse]


class LedgerEntryResponse(BaseModel):
    """One immutable ledger entry."""

    id: int
    product_id: int
    warehouse_id: int
    qty_delta: Quantity
    movement_type: str
    ref_type: str
    ref_id: int
    reference_number: str
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ProjectionMismatch(BaseModel):
    product_id: int
    warehouse_id: int
    ledger_total: Quantity
    balance_qty: Quantity


class ConsistencyReport(BaseModel):
    """Result of comparing ledger sums against balances."""

    consistent: bool
    pairs_checked: int
    mismatches: List[ProjectionMismatch]


class StockChange(BaseModel):
    """A balance change written while completing an operation."""

    entry_id: int
    product_id: int
    warehouse_id: int
    movement_type: str
    qty_delta: Quantity
    previous_qty: Quantity
    new_qty: Quantity


class CompletionResponse(BaseModel):
    """Response after completing an operation."""

    id: int
    reference: str
    reference_number: str
    status: OperationStatus
    completed_at: datetime
    movements_created: int
    movements: List[StockChange]
