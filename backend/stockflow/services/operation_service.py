"""Operation service - the draft lifecycle shared by receipts, deliveries, transfers and adjustments.

Subclasses describe their models and how a completed operation turns into
stock moves; creation, editing, line management, cancellation and the
one-time completion live here.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stockflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from stockflow.db.session import transaction
from stockflow.models.operation import OperationStatus
from stockflow.models.product import Product
from stockflow.models.warehouse import Warehouse
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove

logger = logging.getLogger(__name__)


class OperationService:
    """Base class; see ``ReceiptService`` and friends for concrete configuration."""

    model: Any = None
    line_model: Any = None
    line_fk: str = ""  # column on the line pointing at the header, e.g. "receipt_id"
    merge_field: str = "qty_ordered"  # summed when a product is added twice
    label: str = "Operation"
    ref_type: str = ""
    ref_prefix: str = ""
    warehouse_fields: Tuple[str, ...] = ("warehouse_id",)

    def __init__(self, db: Session, allow_negative_stock: Optional[bool] = None):
        self.db = db
        self.allow_negative_stock = allow_negative_stock

    # ===== LOOKUPS =====

    def get(self, operation_id: int):
        operation = self.db.query(self.model).filter(self.model.id == operation_id).first()
        if not operation:
            raise NotFoundError(self.label, operation_id)
        return operation

    def list_operations(
        self,
        status: Optional[OperationStatus] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[Any], int]:
        query = self.db.query(self.model)
        if status:
            query = query.filter(self.model.status == status)
        total = query.count()
        items = (
            query.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return items, total

    def reference_number(self, operation) -> str:
        return f"{self.ref_prefix}-{operation.id}"

    def _require_warehouse(self, warehouse_id: int) -> None:
        if not self.db.query(Warehouse.id).filter(Warehouse.id == warehouse_id).first():
            raise NotFoundError("Warehouse", warehouse_id)

    def _require_product(self, product_id: int) -> None:
        if not self.db.query(Product.id).filter(Product.id == product_id).first():
            raise NotFoundError("Product", product_id)

    def _require_unique_reference(self, reference: str, exclude_id: Optional[int] = None) -> None:
        query = self.db.query(self.model.id).filter(self.model.reference == reference)
        if exclude_id is not None:
            query = query.filter(self.model.id != exclude_id)
        if query.first():
            raise ConflictError(f"{self.label} reference already exists")

    def _require_open(self, operation, action: str = "update") -> None:
        if not operation.is_open:
            raise ValidationError(
                f"Cannot {action} {self.label.lower()} with status: {operation.status.value}"
            )

    @staticmethod
    def _reject_nulls(model, values: Dict[str, Any]) -> None:
        """Explicit nulls are only accepted for nullable columns."""
        columns = model.__table__.c
        for field, value in values.items():
            if value is None and field in columns and not columns[field].nullable:
                raise ValidationError(f"{field} cannot be null")

    def _validate_header(self, values: Dict[str, Any], operation=None) -> None:
        """Hook for cross-field header checks; referenced warehouses must exist."""
        for field in self.warehouse_fields:
            if values.get(field) is not None:
                self._require_warehouse(values[field])

    # ===== DRAFT EDITING =====

    def create(self, data: BaseModel, created_by: Optional[int] = None):
        """Create an operation in draft, optionally with lines."""
        values = data.model_dump(exclude={"lines"})
        self._require_unique_reference(values["reference"])
        self._validate_header(values)
        lines = getattr(data, "lines", [])
        for line in lines:
            self._require_product(line.product_id)

        operation = self.model(**values, created_by=created_by, status=OperationStatus.DRAFT)
        try:
            with transaction(self.db):
                self.db.add(operation)
                self.db.flush()
                for line in lines:
                    self._merge_line(operation, line)
        except IntegrityError as exc:
            raise ConflictError(f"{self.label} reference already exists") from exc

        self.db.refresh(operation)
        logger.info(
            "%s created: ID=%s, reference=%s, user=%s",
            self.label, operation.id, operation.reference, created_by,
        )
        return operation

    def update(self, operation_id: int, data: BaseModel):
        """Update header fields of an open operation."""
        operation = self.get(operation_id)
        self._require_open(operation)

        values = data.model_dump(exclude_unset=True)
        if not values:
            raise ValidationError("No fields to update")
        self._reject_nulls(self.model, values)
        if values.get("reference") is not None:
            self._require_unique_reference(values["reference"], exclude_id=operation.id)
        self._validate_header(values, operation)

        try:
            with transaction(self.db):
                for field, value in values.items():
                    setattr(operation, field, value)
        except IntegrityError as exc:
            if "reference" in values:
                raise ConflictError(f"{self.label} reference already exists") from exc
            raise

        self.db.refresh(operation)
        return operation

    def add_line(self, operation_id: int, data: BaseModel):
        """Add a line; a product already on the operation has its quantity increased."""
        operation = self.get(operation_id)
        self._require_open(operation, "add lines to")
        self._require_product(data.product_id)

        with transaction(self.db):
            line = self._merge_line(operation, data)

        self.db.refresh(line)
        return line

    def _merge_line(self, operation, data: BaseModel):
        existing = (
            self.db.query(self.line_model)
            .filter(
                getattr(self.line_model, self.line_fk) == operation.id,
                self.line_model.product_id == data.product_id,
            )
            .first()
        )
        if existing:
            # Only fields the caller actually sent replace the existing line's values
            values = data.model_dump(exclude_unset=True, exclude={"product_id"})
            added = values.pop(self.merge_field, getattr(data, self.merge_field))
            setattr(existing, self.merge_field, getattr(existing, self.merge_field) + added)
            for field, value in values.items():
                if value is not None:
                    setattr(existing, field, value)
            self.db.flush()
            return existing

        values = data.model_dump()
        line = self.line_model(**values, **{self.line_fk: operation.id})
        self.db.add(line)
        self.db.flush()
        return line

    def _get_line(self, operation_id: int, line_id: int):
        line = (
            self.db.query(self.line_model)
            .filter(
                self.line_model.id == line_id,
                getattr(self.line_model, self.line_fk) == operation_id,
            )
            .first()
        )
        if not line:
            raise NotFoundError(f"{self.label} line", line_id)
        return line

    def update_line(self, operation_id: int, line_id: int, data: BaseModel):
        operation = self.get(operation_id)
        self._require_open(operation, "update lines of")
        line = self._get_line(operation_id, line_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields to update")
        self._reject_nulls(self.line_model, update_data)

        with transaction(self.db):
            for field, value in update_data.items():
                setattr(line, field, value)

        self.db.refresh(line)
        return line

    def delete_line(self, operation_id: int, line_id: int) -> None:
        operation = self.get(operation_id)
        self._require_open(operation, "delete lines from")
        line = self._get_line(operation_id, line_id)

        with transaction(self.db):
            self.db.delete(line)

    def cancel(self, operation_id: int):
        operation = self.get(operation_id)
        if operation.status == OperationStatus.DONE:
            raise ConflictError(f"Cannot cancel a completed {self.label.lower()}")
        if operation.status == OperationStatus.CANCELED:
            raise ConflictError(f"{self.label} already canceled")

        with transaction(self.db):
            operation.status = OperationStatus.CANCELED

        logger.info("%s canceled: ID=%s", self.label, operation.id)
        return operation

    # ===== COMPLETION =====

    def build_moves(self, operation, ledger: StockLedgerService) -> List[StockMove]:
        """Translate the operation's lines into signed stock moves."""
        raise NotImplementedError

    @staticmethod
    def done_qty(line):
        """Quantity actually processed; lines never updated fall back to the ordered quantity."""
        return line.qty_done if line.qty_done is not None else line.qty_ordered

    def complete(self, operation_id: int, completed_by: Optional[int] = None) -> Dict[str, Any]:
        """Complete an operation: post its moves and mark it done, atomically.

        Steps:
        1. Lock the operation row and check it exists and is still open.
        2. Build the stock moves from the lines.
        3. Post every move through ``StockLedgerService`` (balance upsert
           plus one ledger entry each).
        4. Mark the operation done with a completion timestamp.
        5. Commit, or roll back everything on any error.

        Raises:
            NotFoundError: Unknown operation.
            ConflictError: Operation already done or canceled, or an
                outbound move exceeds stock.
            ValidationError: Operation has no lines.
        """
        ledger = StockLedgerService(self.db, allow_negative_stock=self.allow_negative_stock)

        with transaction(self.db):
            operation = (
                self.db.query(self.model)
                .filter(self.model.id == operation_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
            if not operation:
                raise NotFoundError(self.label, operation_id)
            if operation.status == OperationStatus.DONE:
                raise ConflictError(f"{self.label} already completed")
            if operation.status == OperationStatus.CANCELED:
                raise ConflictError(f"Cannot complete a canceled {self.label.lower()}")
            if not operation.lines:
                raise ValidationError(f"{self.label} has no lines to complete")

            reference_number = self.reference_number(operation)
            moves = self.build_moves(operation, ledger)
            changes = ledger.post(
                moves,
                ref_type=self.ref_type,
                ref_id=operation.id,
                reference_number=reference_number,
                created_by=completed_by,
            )

            operation.status = OperationStatus.DONE
            operation.completed_at = datetime.now(timezone.utc)

        logger.info(
            "%s completed: ID=%s, reference=%s, movements=%s, user=%s",
            self.label, operation.id, reference_number, len(changes), completed_by,
        )

        return {
            "id": operation.id,
            "reference": operation.reference,
            "reference_number": reference_number,
            "status": operation.status,
            "completed_at": operation.completed_at,
            "movements_created": len(changes),
            "movements": changes,
        }
