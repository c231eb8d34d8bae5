"""Stock routes - balances, the ledger and the projection consistency check.

Read only: every quantity change goes through an operation's completion.
"""

from typing import Optional

from fastapi import APIRouter, Query, Request

from stockflow.core.rate_limit import limiter
from stockflow.core.rbac import CurrentUser
from stockflow.core.responses import paginated_response, success_response
from stockflow.db.session import DbSession
from stockflow.models.stock import MovementType
from stockflow.schemas.common import ApiResponse, PaginatedResponse
from stockflow.schemas.stock import (
    ConsistencyReport,
    LedgerEntryResponse,
    ProductStockResponse,
    StockBalanceResponse,
)
from stockflow.services.stock_ledger_service import StockLedgerService

router = APIRouter()


@router.get("/", response_model=ApiResponse[PaginatedResponse[StockBalanceResponse]])
@limiter.limit("60/minute")
def list_stock(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    product_id: Optional[int] = None,
    warehouse_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    """Current balances, optionally for one product and/or warehouse."""
    rows, total = StockLedgerService(db).list_balances(product_id, warehouse_id, skip, limit)
    items = [StockBalanceResponse.model_validate(row) for row in rows]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/products/{product_id}", response_model=ApiResponse[ProductStockResponse])
@limiter.limit("60/minute")
def get_product_stock(request: Request, db: DbSession, current_user: CurrentUser, product_id: int):
    """Stock of one product by warehouse."""
    result = StockLedgerService(db).product_balances(product_id)
    return success_response(ProductStockResponse(
        product_id=result["product_id"],
        total_quantity=result["total_quantity"],
        balances=[StockBalanceResponse.model_validate(row) for row in result["balances"]],
    ))


@router.get("/ledger", response_model=ApiResponse[PaginatedResponse[LedgerEntryResponse]])
@limiter.limit("60/minute")
def list_ledger(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    product_id: Optional[int] = None,
    warehouse_id: Optional[int] = None,
    movement_type: Optional[MovementType] = None,
    reference_type: Optional[str] = None,
    reference_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
):
    """Ledger entries, newest first."""
    entries, total = StockLedgerService(db).list_entries(
        product_id=product_id,
        warehouse_id=warehouse_id,
        movement_type=movement_type,
        ref_type=reference_type,
        ref_id=reference_id,
        skip=skip,
        limit=limit,
    )
    items = [LedgerEntryResponse.model_validate(e) for e in entries]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/verify", response_model=ApiResponse[ConsistencyReport])
@limiter.limit("10/minute")
def verify_stock(request: Request, db: DbSession, current_user: CurrentUser):
    """Check that every balance equals the sum of its ledger entries."""
    return success_response(StockLedgerService(db).verify_consistency())
