"""Delivery service - outgoing goods."""

from typing import List

from stockflow.models.delivery import Delivery, DeliveryLine
from stockflow.models.stock import MovementType
from stockflow.services.operation_service import OperationService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove


class DeliveryService(OperationService):
    model = Delivery
    line_model = DeliveryLine
    line_fk = "delivery_id"
    label = "Delivery"
    ref_type = "delivery"
    ref_prefix = "DEL"

    def build_moves(self, delivery: Delivery, ledger: StockLedgerService) -> List[StockMove]:
        return [
            StockMove(
                product_id=line.product_id,
                warehouse_id=delivery.warehouse_id,
                qty_delta=-self.done_qty(line),
                movement_type=MovementType.DELIVERY,
                notes=line.notes,
            )
            for line in delivery.lines
        ]
