"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPERATION_STATUSES = ("DRAFT", "WAITING", "READY", "DONE", "CANCELED")
ADJUSTMENT_REASONS = ("DAMAGE", "LOSS", "SURPLUS", "DISCREPANCY", "RECOUNT", "CORRECTION", "OTHER")

# Shared by all four operation tables, so created once up front
operation_status = postgresql.ENUM(*OPERATION_STATUSES, name="operationstatus", create_type=False)
adjustment_reason = postgresql.ENUM(*ADJUSTMENT_REASONS, name="adjustmentreason", create_type=False)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _operation_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("reference", sa.String(50), nullable=False, unique=True, index=True),
        sa.Column("status", operation_status, nullable=False, index=True),
        sa.Column("notes", sa.String(1000), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def _line_columns(parent_table: str, parent_fk: str):
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(parent_fk, sa.Integer(), sa.ForeignKey(f"{parent_table}.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("qty_ordered", sa.Numeric(12, 2), nullable=False),
        sa.Column("qty_done", sa.Numeric(12, 2), nullable=True),
        sa.Column("uom", sa.String(20), nullable=False, server_default="pcs"),
        sa.Column("notes", sa.String(500), nullable=True),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        operation_status.create(bind, checkfirst=True)
        adjustment_reason.create(bind, checkfirst=True)

    # Catalog identity
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False, index=True),
        sa.Column("sku", sa.String(50), unique=True, nullable=True, index=True),
        sa.Column("unit", sa.String(20), nullable=False, server_default="pcs"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        "warehouses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("code", sa.String(20), nullable=True, unique=True),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    # Balance projection
    op.create_table(
        "stock_on_hand",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("qty", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("reserved_qty", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("product_id", "warehouse_id", name="uq_stock_product_warehouse"),
    )

    # Ledger (append-only)
    op.create_table(
        "stock_ledger",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("qty_delta", sa.Numeric(12, 2), nullable=False),
        sa.Column("movement_type", sa.String(20), nullable=False, index=True),
        sa.Column("ref_type", sa.String(20), nullable=False),
        sa.Column("ref_id", sa.Integer(), nullable=False),
        sa.Column("reference_number", sa.String(50), nullable=False, index=True),
        sa.Column("notes", sa.String(500), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
    )

    # Receipts
    op.create_table(
        "receipts",
        *_operation_columns(),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("supplier_name", sa.String(255), nullable=True),
        sa.Column("expected_date", sa.Date(), nullable=True),
    )
    op.create_table(
        "receipt_lines",
        *_line_columns("receipts", "receipt_id"),
        sa.Column("unit_cost", sa.Numeric(12, 2), nullable=False, server_default="0"),
    )

    # Deliveries
    op.create_table(
        "deliveries",
        *_operation_columns(),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("customer_name", sa.String(255), nullable=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
        sa.Column("delivery_address", sa.String(500), nullable=True),
    )
    op.create_table("delivery_lines", *_line_columns("deliveries", "delivery_id"))

    # Transfers
    op.create_table(
        "transfers",
        *_operation_columns(),
        sa.Column("from_warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("to_warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("scheduled_date", sa.Date(), nullable=True),
    )
    op.create_table("transfer_lines", *_line_columns("transfers", "transfer_id"))

    # Adjustments
    op.create_table(
        "adjustments",
        *_operation_columns(),
        sa.Column("warehouse_id", sa.Integer(), sa.ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("reason", adjustment_reason, nullable=False, index=True),
    )
    op.create_table(
        "adjustment_lines",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("adjustment_id", sa.Integer(), sa.ForeignKey("adjustments.id", ondelete="CASCADE"), nullable=False, index=True),
        sa.Column("product_id", sa.Integer(), sa.ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True),
        sa.Column("counted_qty", sa.Numeric(12, 2), nullable=False),
        sa.Column("recorded_qty", sa.Numeric(12, 2), nullable=True),
        sa.Column("delta_qty", sa.Numeric(12, 2), nullable=True),
        sa.Column("notes", sa.String(500), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "adjustment_lines", "adjustments",
        "transfer_lines", "transfers",
        "delivery_lines", "deliveries",
        "receipt_lines", "receipts",
        "stock_ledger", "stock_on_hand",
        "warehouses", "products",
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        adjustment_reason.drop(bind, checkfirst=True)
        operation_status.drop(bind, checkfirst=True)
