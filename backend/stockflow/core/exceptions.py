"""Domain exceptions raised by services and rendered by the API layer.

Each exception carries the HTTP status it maps to, so route handlers never
translate error strings into status codes themselves.
"""

from decimal import Decimal
from typing import Optional


class StockflowError(Exception):
    """Base class for all expected, user-facing errors."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(StockflowError):
    """Missing or malformed input, rejected before any write."""

    status_code = 400


class NotFoundError(StockflowError):
    """A referenced operation, line, product or warehouse does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[int] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class ConflictError(StockflowError):
    """Duplicate reference numbers and repeated completions."""

    status_code = 409


class InsufficientStockError(ConflictError):
    """Raised when an outbound movement would drive a balance below zero."""

    def __init__(self, product_id: int, warehouse_id: int, available: Decimal, needed: Decimal):
        self.product_id = product_id
        self.warehouse_id = warehouse_id
        self.available = available
        self.needed = needed
        super().__init__(
            f"Insufficient stock for product {product_id} in warehouse {warehouse_id}: "
            f"need {needed}, have {available}"
        )


class ImmutableRecordError(ConflictError):
    """Attempted to modify or delete an append-only record."""

    def __init__(self, entity_type: str, entity_id: Optional[int], action: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} is immutable and cannot be {action}")
