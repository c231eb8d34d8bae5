"""Adjustment routes - physical count corrections.

Reads are open to any authenticated user; creating, editing and applying
adjustments requires the manager role.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, Request

from stockflow.core.rate_limit import limiter
from stockflow.core.rbac import CurrentUser, RequireManager
from stockflow.core.responses import paginated_response, success_response
from stockflow.db.session import DbSession
from stockflow.models.operation import OperationStatus
from stockflow.schemas.adjustment import (
    AdjustmentCreate,
    AdjustmentHistoryItem,
    AdjustmentLineCreate,
    AdjustmentLineResponse,
    AdjustmentLineUpdate,
    AdjustmentReasonStats,
    AdjustmentResponse,
    AdjustmentUpdate,
)
from stockflow.schemas.common import ApiResponse, PaginatedResponse
from stockflow.schemas.stock import CompletionResponse
from stockflow.services.adjustment_service import AdjustmentService

router = APIRouter()


# ==================== REPORTS ====================

@router.get("/by-reason", response_model=ApiResponse[List[AdjustmentReasonStats]])
@limiter.limit("60/minute")
def get_adjustments_by_reason(request: Request, db: DbSession, current_user: CurrentUser):
    """Applied adjustments grouped by reason."""
    return success_response(AdjustmentService(db).stats_by_reason())


@router.get("/product/{product_id}", response_model=ApiResponse[List[AdjustmentHistoryItem]])
@limiter.limit("60/minute")
def get_product_adjustments(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    product_id: int,
    limit: int = Query(50, ge=1, le=200),
):
    return success_response(AdjustmentService(db).history_for_product(product_id, limit))


@router.get("/warehouse/{warehouse_id}", response_model=ApiResponse[List[AdjustmentHistoryItem]])
@limiter.limit("60/minute")
def get_warehouse_adjustments(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    warehouse_id: int,
    limit: int = Query(50, ge=1, le=200),
):
    return success_response(AdjustmentService(db).history_for_warehouse(warehouse_id, limit))


# ==================== ADJUSTMENTS ====================

@router.post("/", response_model=ApiResponse[AdjustmentResponse], status_code=201)
@limiter.limit("30/minute")
def create_adjustment(request: Request, db: DbSession, current_user: RequireManager, data: AdjustmentCreate):
    adjustment = AdjustmentService(db).create(data, created_by=current_user.user_id)
    return success_response(AdjustmentResponse.model_validate(adjustment), "Adjustment created")


@router.get("/", response_model=ApiResponse[PaginatedResponse[AdjustmentResponse]])
@limiter.limit("60/minute")
def list_adjustments(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    status_filter: Optional[OperationStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    adjustments, total = AdjustmentService(db).list_operations(status_filter, skip, limit)
    items = [AdjustmentResponse.model_validate(a) for a in adjustments]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/{adjustment_id}", response_model=ApiResponse[AdjustmentResponse])
@limiter.limit("60/minute")
def get_adjustment(request: Request, db: DbSession, current_user: CurrentUser, adjustment_id: int):
    adjustment = AdjustmentService(db).get(adjustment_id)
    return success_response(AdjustmentResponse.model_validate(adjustment))


@router.put("/{adjustment_id}", response_model=ApiResponse[AdjustmentResponse])
@limiter.limit("30/minute")
def update_adjustment(
    request: Request, db: DbSession, current_user: RequireManager, adjustment_id: int, data: AdjustmentUpdate
):
    adjustment = AdjustmentService(db).update(adjustment_id, data)
    return success_response(AdjustmentResponse.model_validate(adjustment), "Adjustment updated")


@router.post("/{adjustment_id}/lines", response_model=ApiResponse[AdjustmentLineResponse], status_code=201)
@limiter.limit("30/minute")
def add_adjustment_line(
    request: Request,
    db: DbSession,
    current_user: RequireManager,
    adjustment_id: int,
    data: AdjustmentLineCreate,
):
    line = AdjustmentService(db).add_line(adjustment_id, data)
    return success_response(AdjustmentLineResponse.model_validate(line), "Line added")


@router.put("/{adjustment_id}/lines/{line_id}", response_model=ApiResponse[AdjustmentLineResponse])
@limiter.limit("30/minute")
def update_adjustment_line(
    request: Request,
    db: DbSession,
    current_user: RequireManager,
    adjustment_id: int,
    line_id: int,
    data: AdjustmentLineUpdate,
):
    line = AdjustmentService(db).update_line(adjustment_id, line_id, data)
    return success_response(AdjustmentLineResponse.model_validate(line), "Line updated")


@router.delete("/{adjustment_id}/lines/{line_id}", response_model=ApiResponse[None])
@limiter.limit("30/minute")
def delete_adjustment_line(
    request: Request, db: DbSession, current_user: RequireManager, adjustment_id: int, line_id: int
):
    AdjustmentService(db).delete_line(adjustment_id, line_id)
    return success_response(message="Line deleted")


@router.post("/{adjustment_id}/apply", response_model=ApiResponse[CompletionResponse])
@limiter.limit("30/minute")
def apply_adjustment(request: Request, db: DbSession, current_user: RequireManager, adjustment_id: int):
    """Apply the count: each balance becomes the counted quantity."""
    result = AdjustmentService(db).complete(adjustment_id, completed_by=current_user.user_id)
    return success_response(result, "Adjustment applied")


@router.post("/{adjustment_id}/cancel", response_model=ApiResponse[AdjustmentResponse])
@limiter.limit("30/minute")
def cancel_adjustment(request: Request, db: DbSession, current_user: RequireManager, adjustment_id: int):
    adjustment = AdjustmentService(db).cancel(adjustment_id)
    return success_response(AdjustmentResponse.model_validate(adjustment), "Adjustment canceled")
