"""Tests for completing operations: balance upsert, ledger append and atomicity."""

import pytest
from decimal import Decimal

from stockflow.core.exceptions import (
    ConflictError,
    ImmutableRecordError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from stockflow.models.operation import OperationStatus
from stockflow.models.receipt import Receipt
from stockflow.models.stock import MovementType, StockLedgerEntry, StockOnHand
from stockflow.schemas.adjustment import AdjustmentCreate, AdjustmentLineCreate
from stockflow.schemas.delivery import DeliveryCreate, DeliveryLineCreate
from stockflow.schemas.receipt import ReceiptCreate, ReceiptLineCreate
from stockflow.services.adjustment_service import AdjustmentService
from stockflow.services.delivery_service import DeliveryService
from stockflow.services.receipt_service import ReceiptService
from stockflow.services.stock_ledger_service import StockLedgerService, StockMove


def _balance(db, product, warehouse):
    return db.query(StockOnHand).filter(
        StockOnHand.product_id == product.id,
        StockOnHand.warehouse_id == warehouse.id,
    ).first()


def _entries(db, ref_type=None):
    query = db.query(StockLedgerEntry)
    if ref_type:
        query = query.filter(StockLedgerEntry.ref_type == ref_type)
    return query.order_by(StockLedgerEntry.id).all()


# ============== Receipts ==============

class TestReceiptCompletion:
    def test_receipt_on_empty_balance(self, db_session, test_product, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-1001",
            warehouse_id=test_warehouse.id,
            lines=[ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("50"))],
        ), created_by=7)

        result = service.complete(receipt.id, completed_by=7)

        assert result["status"] == OperationStatus.DONE
        assert result["reference_number"] == f"RCP-{receipt.id}"
        assert result["movements_created"] == 1
        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("50")

        entries = _entries(db_session)
        assert len(entries) == 1
        assert entries[0].qty_delta == Decimal("50")
        assert entries[0].movement_type == MovementType.RECEIPT.value
        assert entries[0].ref_id == receipt.id
        assert entries[0].created_by == 7

    def test_received_quantity_overrides_ordered(self, db_session, test_product, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-1002",
            warehouse_id=test_warehouse.id,
            lines=[ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("50"))],
        ))
        receipt.lines[0].qty_done = Decimal("48")
        db_session.commit()

        service.complete(receipt.id)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("48")

    def test_completion_sets_timestamp(self, db_session, test_product, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-1003",
            warehouse_id=test_warehouse.id,
            lines=[ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("5"))],
        ))
        service.complete(receipt.id)

        db_session.expire_all()
        stored = db_session.get(Receipt, receipt.id)
        assert stored.status == OperationStatus.DONE
        assert stored.completed_at is not None

    def test_double_completion_conflicts(self, db_session, test_product, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-1004",
            warehouse_id=test_warehouse.id,
            lines=[ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("50"))],
        ))
        service.complete(receipt.id)

        with pytest.raises(ConflictError):
            service.complete(receipt.id)

        assert len(_entries(db_session)) == 1
        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("50")

    def test_unknown_operation(self, db_session):
        with pytest.raises(NotFoundError):
            ReceiptService(db_session).complete(999)

    def test_empty_operation_rejected(self, db_session, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(reference="PO-1005", warehouse_id=test_warehouse.id))

        with pytest.raises(ValidationError):
            service.complete(receipt.id)
        assert _entries(db_session) == []

    def test_canceled_operation_cannot_complete(self, db_session, test_product, test_warehouse):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-1006",
            warehouse_id=test_warehouse.id,
            lines=[ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("1"))],
        ))
        service.cancel(receipt.id)

        with pytest.raises(ConflictError):
            service.complete(receipt.id)
        assert _balance(db_session, test_product, test_warehouse) is None


# ============== Deliveries ==============

class TestDeliveryCompletion:
    def test_delivery_reduces_balance(self, db_session, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("150"))
        service = DeliveryService(db_session)
        delivery = service.create(DeliveryCreate(
            reference="SO-2001",
            warehouse_id=test_warehouse.id,
            lines=[DeliveryLineCreate(product_id=test_product.id, qty_ordered=Decimal("30"))],
        ))

        result = service.complete(delivery.id)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("120")
        entries = _entries(db_session, "delivery")
        assert len(entries) == 1
        assert entries[0].qty_delta == Decimal("-30")
        assert entries[0].reference_number == f"DEL-{delivery.id}"
        assert result["movements"][0]["previous_qty"] == Decimal("150")
        assert result["movements"][0]["new_qty"] == Decimal("120")

    def test_insufficient_stock_leaves_everything_untouched(
        self, db_session, test_product, test_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("10"))
        service = DeliveryService(db_session)
        delivery = service.create(DeliveryCreate(
            reference="SO-2002",
            warehouse_id=test_warehouse.id,
            lines=[DeliveryLineCreate(product_id=test_product.id, qty_ordered=Decimal("11"))],
        ))

        with pytest.raises(InsufficientStockError):
            service.complete(delivery.id)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("10")
        assert _entries(db_session, "delivery") == []
        assert service.get(delivery.id).status == OperationStatus.DRAFT

    def test_negative_stock_when_allowed(self, db_session, test_product, test_warehouse):
        service = DeliveryService(db_session, allow_negative_stock=True)
        delivery = service.create(DeliveryCreate(
            reference="SO-2003",
            warehouse_id=test_warehouse.id,
            lines=[DeliveryLineCreate(product_id=test_product.id, qty_ordered=Decimal("4"))],
        ))

        service.complete(delivery.id)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("-4")
        assert StockLedgerService(db_session).verify_consistency()["consistent"]


# ============== Adjustments ==============

class TestAdjustmentCompletion:
    def test_adjustment_writes_counted_minus_recorded(
        self, db_session, test_product, test_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("85"))
        service = AdjustmentService(db_session)
        adjustment = service.create(AdjustmentCreate(
            reference="CNT-1",
            warehouse_id=test_warehouse.id,
            reason="damage",
            lines=[AdjustmentLineCreate(product_id=test_product.id, counted_qty=Decimal("80"))],
        ), created_by=3)

        service.complete(adjustment.id, completed_by=3)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("80")
        entries = _entries(db_session, "adjustment")
        assert len(entries) == 1
        assert entries[0].qty_delta == Decimal("-5")
        assert entries[0].notes == "damage"

        line = service.get(adjustment.id).lines[0]
        assert line.recorded_qty == Decimal("85")
        assert line.delta_qty == Decimal("-5")

    def test_matching_count_writes_no_entry(self, db_session, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("12"))
        service = AdjustmentService(db_session)
        adjustment = service.create(AdjustmentCreate(
            reference="CNT-2",
            warehouse_id=test_warehouse.id,
            lines=[AdjustmentLineCreate(product_id=test_product.id, counted_qty=Decimal("12"))],
        ))

        result = service.complete(adjustment.id)

        assert result["movements_created"] == 0
        assert result["status"] == OperationStatus.DONE
        assert _entries(db_session, "adjustment") == []

    def test_count_of_unseen_product_creates_balance(self, db_session, test_product, test_warehouse):
        service = AdjustmentService(db_session)
        adjustment = service.create(AdjustmentCreate(
            reference="CNT-3",
            warehouse_id=test_warehouse.id,
            reason="surplus",
            lines=[AdjustmentLineCreate(product_id=test_product.id, counted_qty=Decimal("6"))],
        ))

        service.complete(adjustment.id)

        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("6")


# ============== Atomicity and consistency ==============

class TestLedgerIntegrity:
    def test_failure_mid_completion_rolls_back(
        self, db_session, test_product, second_product, test_warehouse, monkeypatch
    ):
        service = ReceiptService(db_session)
        receipt = service.create(ReceiptCreate(
            reference="PO-3001",
            warehouse_id=test_warehouse.id,
            lines=[
                ReceiptLineCreate(product_id=test_product.id, qty_ordered=Decimal("10")),
                ReceiptLineCreate(product_id=second_product.id, qty_ordered=Decimal("20")),
            ],
        ))

        original = StockLedgerService._upsert_balance
        calls = {"n": 0}

        def failing_upsert(self, product_id, warehouse_id, delta):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("connection lost")
            return original(self, product_id, warehouse_id, delta)

        monkeypatch.setattr(StockLedgerService, "_upsert_balance", failing_upsert)

        with pytest.raises(RuntimeError):
            service.complete(receipt.id)

        db_session.expire_all()
        assert _entries(db_session) == []
        assert _balance(db_session, test_product, test_warehouse) is None
        assert service.get(receipt.id).status == OperationStatus.DRAFT

    def test_projection_matches_ledger_after_mixed_operations(
        self, db_session, test_product, test_warehouse, stock_level
    ):
        stock_level(test_product, test_warehouse, Decimal("100"))
        delivery_service = DeliveryService(db_session)
        delivery = delivery_service.create(DeliveryCreate(
            reference="SO-3002",
            warehouse_id=test_warehouse.id,
            lines=[DeliveryLineCreate(product_id=test_product.id, qty_ordered=Decimal("25.5"))],
        ))
        delivery_service.complete(delivery.id)

        adjustment_service = AdjustmentService(db_session)
        adjustment = adjustment_service.create(AdjustmentCreate(
            reference="CNT-3002",
            warehouse_id=test_warehouse.id,
            lines=[AdjustmentLineCreate(product_id=test_product.id, counted_qty=Decimal("70"))],
        ))
        adjustment_service.complete(adjustment.id)

        report = StockLedgerService(db_session).verify_consistency()
        assert report["consistent"] is True
        assert report["pairs_checked"] == 1
        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("70")

    def test_verify_reports_drift(self, db_session, test_product, test_warehouse, stock_level):
        stock = stock_level(test_product, test_warehouse, Decimal("40"))
        stock.qty = Decimal("41")
        db_session.commit()

        report = StockLedgerService(db_session).verify_consistency()

        assert report["consistent"] is False
        assert report["mismatches"] == [{
            "product_id": test_product.id,
            "warehouse_id": test_warehouse.id,
            "ledger_total": Decimal("40"),
            "balance_qty": Decimal("41"),
        }]

    def test_ledger_entries_cannot_be_modified(self, db_session, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("5"))
        entry = db_session.query(StockLedgerEntry).first()

        entry.qty_delta = Decimal("500")
        with pytest.raises(ImmutableRecordError):
            db_session.commit()
        db_session.rollback()

    def test_ledger_entries_cannot_be_deleted(self, db_session, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("5"))
        entry = db_session.query(StockLedgerEntry).first()

        db_session.delete(entry)
        with pytest.raises(ImmutableRecordError):
            db_session.commit()
        db_session.rollback()

    def test_post_skips_zero_deltas(self, db_session, test_product, test_warehouse):
        ledger = StockLedgerService(db_session)
        changes = ledger.post(
            [StockMove(test_product.id, test_warehouse.id, Decimal("0"), MovementType.ADJUSTMENT)],
            ref_type="adjustment",
            ref_id=1,
            reference_number="ADJ-1",
        )
        db_session.commit()

        assert changes == []
        assert _entries(db_session) == []

    def test_fractional_quantities_stay_consistent(self, db_session, test_product, test_warehouse, stock_level):
        stock_level(test_product, test_warehouse, Decimal("0.1"))
        stock_level(test_product, test_warehouse, Decimal("0.2"))

        report = StockLedgerService(db_session).verify_consistency()

        assert report["consistent"] is True
        assert _balance(db_session, test_product, test_warehouse).qty == Decimal("0.30")
