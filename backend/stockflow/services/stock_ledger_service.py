"""Stock ledger service - the single write path for balances and ledger entries.

Every quantity change goes through ``StockLedgerService.post``, which for
each move reads the prior balance under a row lock, upserts the balance and
appends one ledger entry. ``post`` never commits: callers own the
transaction (see ``stockflow.db.session.transaction``) so that all moves of
an operation, and the operation's own status change, commit or roll back
together.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from stockflow.core.config import settings
from stockflow.core.exceptions import InsufficientStockError, NotFoundError
from stockflow.models.product import Product
from stockflow.models.stock import MovementType, StockLedgerEntry, StockOnHand

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
QTY_SCALE = Decimal("0.01")  # Numeric(12, 2) columns

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class StockMove:
    """A signed quantity change for one (product, warehouse) pair."""

    product_id: int
    warehouse_id: int
    qty_delta: Decimal
    movement_type: MovementType
    notes: Optional[str] = None


class StockLedgerService:
    """Balance projection and ledger access."""

    def __init__(self, db: Session, allow_negative_stock: Optional[bool] = None):
        self.db = db
        if allow_negative_stock is None:
            allow_negative_stock = settings.allow_negative_stock
        self.allow_negative_stock = allow_negative_stock

    # ===== WRITES =====

    def lock_balance(self, product_id: int, warehouse_id: int) -> Optional[StockOnHand]:
        """Read a balance row with ``SELECT ... FOR UPDATE`` (a no-op on SQLite)."""
        return (
            self.db.query(StockOnHand)
            .filter(
                StockOnHand.product_id == product_id,
                StockOnHand.warehouse_id == warehouse_id,
            )
            .with_for_update()
            .populate_existing()
            .first()
        )

    def current_qty(self, product_id: int, warehouse_id: int) -> Decimal:
        stock = self.lock_balance(product_id, warehouse_id)
        return stock.qty if stock else ZERO

    def post(
        self,
        moves: Iterable[StockMove],
        ref_type: str,
        ref_id: int,
        reference_number: str,
        created_by: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Apply moves to the balance projection and append ledger entries.

        Moves with a zero delta are skipped. Must be called inside an open
        transaction; nothing is committed here.

        Returns:
            One dict per ledger entry written, with the balance before and
            after the move.

        Raises:
            InsufficientStockError: If an outbound move would leave a
                negative balance and negative stock is not allowed.
        """
        changes: List[Dict[str, Any]] = []

        for move in moves:
            delta = Decimal(move.qty_delta)
            if delta == 0:
                continue

            previous_qty = self.current_qty(move.product_id, move.warehouse_id)
            if delta < 0 and previous_qty + delta < 0 and not self.allow_negative_stock:
                raise InsufficientStockError(
                    product_id=move.product_id,
                    warehouse_id=move.warehouse_id,
                    available=previous_qty,
                    needed=-delta,
                )

            new_qty = self._upsert_balance(move.product_id, move.warehouse_id, delta)

            entry = StockLedgerEntry(
                product_id=move.product_id,
                warehouse_id=move.warehouse_id,
                qty_delta=delta,
                movement_type=move.movement_type.value,
                ref_type=ref_type,
                ref_id=ref_id,
                reference_number=reference_number,
                notes=move.notes,
                created_by=created_by,
            )
            self.db.add(entry)
            self.db.flush()

            changes.append({
                "entry_id": entry.id,
                "product_id": move.product_id,
                "warehouse_id": move.warehouse_id,
                "movement_type": move.movement_type.value,
                "qty_delta": delta,
                "previous_qty": previous_qty,
                "new_qty": new_qty,
            })

        return changes

    def _upsert_balance(self, product_id: int, warehouse_id: int, delta: Decimal) -> Decimal:
        """Add ``delta`` to the balance row, creating it on first use."""
        insert = _UPSERT_DIALECTS.get(self.db.get_bind().dialect.name)

        if insert is not None:
            table = StockOnHand.__table__
            stmt = insert(table).values(
                product_id=product_id,
                warehouse_id=warehouse_id,
                qty=delta,
                reserved_qty=ZERO,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[table.c.product_id, table.c.warehouse_id],
                set_={"qty": table.c.qty + delta, "updated_at": func.now()},
            )
            self.db.execute(stmt)
            return self.lock_balance(product_id, warehouse_id).qty

        # Dialects without INSERT ... ON CONFLICT: read-modify-write on the locked row
        stock = self.lock_balance(product_id, warehouse_id)
        if stock:
            stock.qty = stock.qty + delta
        else:
            stock = StockOnHand(
                product_id=product_id,
                warehouse_id=warehouse_id,
                qty=delta,
                reserved_qty=ZERO,
            )
            self.db.add(stock)
        self.db.flush()
        return stock.qty

    # ===== READS =====

    def list_balances(
        self,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[StockOnHand], int]:
        query = self.db.query(StockOnHand)
        if product_id:
            query = query.filter(StockOnHand.product_id == product_id)
        if warehouse_id:
            query = query.filter(StockOnHand.warehouse_id == warehouse_id)

        total = query.count()
        rows = (
            query.order_by(StockOnHand.product_id, StockOnHand.warehouse_id)
            .offset(skip)
            .limit(limit)
            .all()
        )
        return rows, total

    def product_balances(self, product_id: int) -> Dict[str, Any]:
        """Balances of one product in every warehouse holding a row for it."""
        if not self.db.query(Product.id).filter(Product.id == product_id).first():
            raise NotFoundError("Product", product_id)

        rows = (
            self.db.query(StockOnHand)
            .filter(StockOnHand.product_id == product_id)
            .order_by(StockOnHand.warehouse_id)
            .all()
        )
        return {
            "product_id": product_id,
            "total_quantity": sum((row.qty for row in rows), ZERO),
            "balances": rows,
        }

    def list_entries(
        self,
        product_id: Optional[int] = None,
        warehouse_id: Optional[int] = None,
        movement_type: Optional[MovementType] = None,
        ref_type: Optional[str] = None,
        ref_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[StockLedgerEntry], int]:
        """Ledger entries, newest first."""
        query = self.db.query(StockLedgerEntry)
        if product_id:
            query = query.filter(StockLedgerEntry.product_id == product_id)
        if warehouse_id:
            query = query.filter(StockLedgerEntry.warehouse_id == warehouse_id)
        if movement_type:
            query = query.filter(StockLedgerEntry.movement_type == movement_type.value)
        if ref_type:
            query = query.filter(StockLedgerEntry.ref_type == ref_type)
        if ref_id is not None:
            query = query.filter(StockLedgerEntry.ref_id == ref_id)

        total = query.count()
        entries = (
            query.order_by(StockLedgerEntry.created_at.desc(), StockLedgerEntry.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return entries, total

    def verify_consistency(self) -> Dict[str, Any]:
        """Compare the ledger sum with the balance for every (product, warehouse) pair."""
        ledger_sums = {
            (row.product_id, row.warehouse_id): Decimal(str(row.total or 0)).quantize(QTY_SCALE)
            for row in self.db.query(
                StockLedgerEntry.product_id,
                StockLedgerEntry.warehouse_id,
                func.sum(StockLedgerEntry.qty_delta).label("total"),
            ).group_by(StockLedgerEntry.product_id, StockLedgerEntry.warehouse_id)
        }
        balances = {
            (row.product_id, row.warehouse_id): Decimal(str(row.qty or 0)).quantize(QTY_SCALE)
            for row in self.db.query(
                StockOnHand.product_id, StockOnHand.warehouse_id, StockOnHand.qty
            )
        }

        mismatches = []
        for key in sorted(set(ledger_sums) | set(balances)):
            ledger_total = ledger_sums.get(key, ZERO)
            balance_qty = balances.get(key, ZERO)
            if ledger_total != balance_qty:
                mismatches.append({
                    "product_id": key[0],
                    "warehouse_id": key[1],
                    "ledger_total": ledger_total,
                    "balance_qty": balance_qty,
                })

        if mismatches:
            logger.warning("Stock projection mismatch on %s pair(s): %s", len(mismatches), mismatches)

        return {
            "consistent": not mismatches,
            "pairs_checked": len(set(ledger_sums) | set(balances)),
            "mismatches": mismatches,
        }
