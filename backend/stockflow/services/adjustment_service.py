"""Adjustment service - physical count corrections.

Applying an adjustment compares each counted quantity with the recorded
balance at that moment and posts the difference to the ledger.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import func

from stockflow.core.exceptions import NotFoundError
from stockflow.models.adjustment import Adjustment, AdjustmentLine
from stockflow.models.operation import OperationStatus
from stockflow.models.product import Product
from stockflow.models.stock import MovementType
from stockflow.models.warehouse import Warehouse
from stockflow.services.operation_service import OperationService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove

logger = logging.getLogger(__name__)


class AdjustmentService(OperationService):
    model = Adjustment
    line_model = AdjustmentLine
    line_fk = "adjustment_id"
    merge_field = "counted_qty"
    label = "Adjustment"
    ref_type = "adjustment"
    ref_prefix = "ADJ"

    def build_moves(self, adjustment: Adjustment, ledger: StockLedgerService) -> List[StockMove]:
        """Snapshot recorded quantities under lock and move by the counted difference."""
        moves = []
        for line in adjustment.lines:
            recorded = ledger.current_qty(line.product_id, adjustment.warehouse_id)
            line.recorded_qty = recorded
            line.delta_qty = line.counted_qty - recorded
            moves.append(StockMove(
                product_id=line.product_id,
                warehouse_id=adjustment.warehouse_id,
                qty_delta=line.delta_qty,
                movement_type=MovementType.ADJUSTMENT,
                notes=adjustment.reason.value,
            ))
        return moves

    # ===== REPORTING =====

    def stats_by_reason(self) -> List[Dict[str, Any]]:
        """Count and absolute quantity change of applied adjustments, per reason."""
        rows = (
            self.db.query(
                Adjustment.reason,
                func.count(func.distinct(Adjustment.id)).label("adjustment_count"),
                func.coalesce(func.sum(func.abs(AdjustmentLine.delta_qty)), 0).label("total_change"),
            )
            .join(AdjustmentLine, AdjustmentLine.adjustment_id == Adjustment.id)
            .filter(Adjustment.status == OperationStatus.DONE)
            .group_by(Adjustment.reason)
            .order_by(Adjustment.reason)
            .all()
        )
        return [
            {
                "reason": row.reason,
                "count": row.adjustment_count,
                "total_change": Decimal(str(row.total_change)),
            }
            for row in rows
        ]

    def history_for_product(self, product_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        if not self.db.query(Product.id).filter(Product.id == product_id).first():
            raise NotFoundError("Product", product_id)
        return self._history(AdjustmentLine.product_id == product_id, limit)

    def history_for_warehouse(self, warehouse_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        if not self.db.query(Warehouse.id).filter(Warehouse.id == warehouse_id).first():
            raise NotFoundError("Warehouse", warehouse_id)
        return self._history(Adjustment.warehouse_id == warehouse_id, limit)

    def _history(self, criterion, limit: int) -> List[Dict[str, Any]]:
        rows = (
            self.db.query(AdjustmentLine, Adjustment)
            .join(Adjustment, AdjustmentLine.adjustment_id == Adjustment.id)
            .filter(Adjustment.status == OperationStatus.DONE, criterion)
            .order_by(Adjustment.completed_at.desc(), AdjustmentLine.id.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "adjustment_id": adjustment.id,
                "reference": adjustment.reference,
                "product_id": line.product_id,
                "warehouse_id": adjustment.warehouse_id,
                "reason": adjustment.reason,
                "recorded_qty": line.recorded_qty,
                "counted_qty": line.counted_qty,
                "delta_qty": line.delta_qty,
                "completed_at": adjustment.completed_at,
                "created_by": adjustment.created_by,
            }
            for line, adjustment in rows
        ]
