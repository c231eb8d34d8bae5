"""Transfer service - stock moved between warehouses."""

from typing import Any, Dict, List

from stockflow.core.exceptions import ValidationError
from stockflow.models.stock import MovementType
from stockflow.models.transfer import Transfer, TransferLine
from stockflow.services.operation_service import OperationService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove


class TransferService(OperationService):
    model = Transfer
    line_model = TransferLine
    line_fk = "transfer_id"
    label = "Transfer"
    ref_type = "transfer"
    ref_prefix = "TRF"
    warehouse_fields = ("from_warehouse_id", "to_warehouse_id")

    def _validate_header(self, values: Dict[str, Any], operation=None) -> None:
        super()._validate_header(values, operation)
        source = values.get("from_warehouse_id") or (operation.from_warehouse_id if operation else None)
        destination = values.get("to_warehouse_id") or (operation.to_warehouse_id if operation else None)
        if source is not None and source == destination:
            raise ValidationError("from_warehouse_id and to_warehouse_id must differ")

    def build_moves(self, transfer: Transfer, ledger: StockLedgerService) -> List[StockMove]:
        """Each line leaves the source and arrives at the destination."""
        moves: List[StockMove] = []
        for line in transfer.lines:
            qty = self.done_qty(line)
            moves.append(StockMove(
                product_id=line.product_id,
                warehouse_id=transfer.from_warehouse_id,
                qty_delta=-qty,
                movement_type=MovementType.TRANSFER_OUT,
                notes=line.notes,
            ))
            moves.append(StockMove(
                product_id=line.product_id,
                warehouse_id=transfer.to_warehouse_id,
                qty_delta=qty,
                movement_type=MovementType.TRANSFER_IN,
                notes=line.notes,
            ))
        return moves
