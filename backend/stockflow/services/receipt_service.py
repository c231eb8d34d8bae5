"""Receipt service - incoming goods."""

from typing import List

from stockflow.models.receipt import Receipt, ReceiptLine
from stockflow.models.stock import MovementType
from stockflow.services.operation_service import OperationService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove


class ReceiptService(OperationService):
    model = Receipt
    line_model = ReceiptLine
    line_fk = "receipt_id"
    label = "Receipt"
    ref_type = "receipt"
    ref_prefix = "RCP"

    def build_moves(self, receipt: Receipt, ledger: StockLedgerService) -> List[StockMove]:
        return [
            StockMove(
                product_id=line.product_id,
                warehouse_id=receipt.warehouse_id,
                qty_delta=self.done_qty(line),
                movement_type=MovementType.RECEIPT,
                notes=line.notes,
            )
            for line in receipt.lines
        ]
