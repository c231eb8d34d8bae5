"""Business logic services."""

from stockflow.services.adjustment_service import AdjustmentService
from stockflow.services.delivery_service import DeliveryService
from stockflow.services.operation_service import OperationService
from stockflow.services.receipt_service import ReceiptService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove
from stockflow.services.transfer_service import TransferService

__all__ = [
    "AdjustmentService",
    "DeliveryService",
    "OperationService",
    "ReceiptService",
    "StockLedgerService",
    "StockMove",
    "TransferService",
]
