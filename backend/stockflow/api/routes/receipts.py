"""Receipt routes - incoming goods into a warehouse."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from stockflow.core.rate_limit import limiter
from stockflow.core.rbac import CurrentUser
from stockflow.core.responses import paginated_response, success_response
from stockflow.db.session import DbSession
from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import ApiResponse, PaginatedResponse
from stockflow.schemas.receipt import (
    ReceiptCreate,
    ReceiptLineCreate,
    ReceiptLineResponse,
    ReceiptLineUpdate,
    ReceiptResponse,
    ReceiptUpdate,
)
from stockflow.schemas.stock import CompletionResponse
from stockflow.services.receipt_service import ReceiptService

router = APIRouter()


@router.post("/", response_model=ApiResponse[ReceiptResponse], status_code=201)
@limiter.limit("30/minute")
def create_receipt(request: Request, db: DbSession, current_user: CurrentUser, data: ReceiptCreate):
    """Create a receipt in draft."""
    receipt = ReceiptService(db).create(data, created_by=current_user.user_id)
    return success_response(ReceiptResponse.model_validate(receipt), "Receipt created")


@router.get("/", response_model=ApiResponse[PaginatedResponse[ReceiptResponse]])
@limiter.limit("60/minute")
def list_receipts(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    status_filter: Optional[OperationStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    receipts, total = ReceiptService(db).list_operations(status_filter, skip, limit)
    items = [ReceiptResponse.model_validate(r) for r in receipts]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/{receipt_id}", response_model=ApiResponse[ReceiptResponse])
@limiter.limit("60/minute")
def get_receipt(request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int):
    receipt = ReceiptService(db).get(receipt_id)
    return success_response(ReceiptResponse.model_validate(receipt))


@router.put("/{receipt_id}", response_model=ApiResponse[ReceiptResponse])
@limiter.limit("30/minute")
def update_receipt(
    request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int, data: ReceiptUpdate
):
    receipt = ReceiptService(db).update(receipt_id, data)
    return success_response(ReceiptResponse.model_validate(receipt), "Receipt updated")


@router.post("/{receipt_id}/lines", response_model=ApiResponse[ReceiptLineResponse], status_code=201)
@limiter.limit("30/minute")
def add_receipt_line(
    request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int, data: ReceiptLineCreate
):
    line = ReceiptService(db).add_line(receipt_id, data)
    return success_response(ReceiptLineResponse.model_validate(line), "Line added")


@router.put("/{receipt_id}/lines/{line_id}", response_model=ApiResponse[ReceiptLineResponse])
@limiter.limit("30/minute")
def update_receipt_line(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    receipt_id: int,
    line_id: int,
    data: ReceiptLineUpdate,
):
    line = ReceiptService(db).update_line(receipt_id, line_id, data)
    return success_response(ReceiptLineResponse.model_validate(line), "Line updated")


@router.delete("/{receipt_id}/lines/{line_id}", response_model=ApiResponse[None])
@limiter.limit("30/minute")
def delete_receipt_line(
    request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int, line_id: int
):
    ReceiptService(db).delete_line(receipt_id, line_id)
    return success_response(message="Line deleted")


@router.post("/{receipt_id}/receive", response_model=ApiResponse[CompletionResponse])
@limiter.limit("30/minute")
def receive_receipt(request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int):
    """Receive the goods: stock goes up by each line's received quantity."""
    result = ReceiptService(db).complete(receipt_id, completed_by=current_user.user_id)
    return success_response(result, "Receipt validated successfully")


@router.post("/{receipt_id}/cancel", response_model=ApiResponse[ReceiptResponse])
@limiter.limit("30/minute")
def cancel_receipt(request: Request, db: DbSession, current_user: CurrentUser, receipt_id: int):
    receipt = ReceiptService(db).cancel(receipt_id)
    return success_response(ReceiptResponse.model_validate(receipt), "Receipt canceled")
