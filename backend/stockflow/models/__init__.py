"""SQLAlchemy models."""

from stockflow.models.product import Product
from stockflow.models.warehouse import Warehouse
from stockflow.models.stock import MovementType, StockLedgerEntry, StockOnHand
from stockflow.models.operation import OperationStatus
from stockflow.models.receipt import Receipt, ReceiptLine
from stockflow.models.delivery import Delivery, DeliveryLine
from stockflow.models.transfer import Transfer, TransferLine
from stockflow.models.adjustment import Adjustment, AdjustmentLine, AdjustmentReason

__all__ = [
    "Product",
    "Warehouse",
    "MovementType",
    "StockLedgerEntry",
    "StockOnHand",
    "OperationStatus",
    "Receipt",
    "ReceiptLine",
    "Delivery",
    "DeliveryLine",
    "Transfer",
    "TransferLine",
    "Adjustment",
    "AdjustmentLine",
    "AdjustmentReason",
]
