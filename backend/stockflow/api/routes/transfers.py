"""Transfer routes - stock moved between warehouses."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from stockflow.core.rate_limit import limiter
from stockflow.core.rbac import CurrentUser
from stockflow.core.responses import paginated_response, success_response
from stockflow.db.session import DbSession
from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import ApiResponse, PaginatedResponse
from stockflow.schemas.transfer import (
    TransferCreate,
    TransferLineCreate,
    TransferLineResponse,
    TransferLineUpdate,
    TransferResponse,
    TransferUpdate,
)
from stockflow.schemas.stock import CompletionResponse
from stockflow.services.transfer_service import TransferService

router = APIRouter()


@router.post("/", response_model=ApiResponse[TransferResponse], status_code=201)
@limiter.limit("30/minute")
def create_transfer(request: Request, db: DbSession, current_user: CurrentUser, data: TransferCreate):
    """Create a transfer in draft."""
    transfer = TransferService(db).create(data, created_by=current_user.user_id)
    return success_response(TransferResponse.model_validate(transfer), "Transfer created")


@router.get("/", response_model=ApiResponse[PaginatedResponse[TransferResponse]])
@limiter.limit("60/minute")
def list_transfers(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    status_filter: Optional[OperationStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    transfers, total = TransferService(db).list_operations(status_filter, skip, limit)
    items = [TransferResponse.model_validate(t) for t in transfers]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/{transfer_id}", response_model=ApiResponse[TransferResponse])
@limiter.limit("60/minute")
def get_transfer(request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int):
    transfer = TransferService(db).get(transfer_id)
    return success_response(TransferResponse.model_validate(transfer))


@router.put("/{transfer_id}", response_model=ApiResponse[TransferResponse])
@limiter.limit("30/minute")
def update_transfer(
    request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int, data: TransferUpdate
):
    transfer = TransferService(db).update(transfer_id, data)
    return success_response(TransferResponse.model_validate(transfer), "Transfer updated")


@router.post("/{transfer_id}/lines", response_model=ApiResponse[TransferLineResponse], status_code=201)
@limiter.limit("30/minute")
def add_transfer_line(
    request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int, data: TransferLineCreate
):
    line = TransferService(db).add_line(transfer_id, data)
    return success_response(TransferLineResponse.model_validate(line), "Line added")


@router.put("/{transfer_id}/lines/{line_id}", response_model=ApiResponse[TransferLineResponse])
@limiter.limit("30/minute")
def update_transfer_line(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    transfer_id: int,
    line_id: int,
    data: TransferLineUpdate,
):
    line = TransferService(db).update_line(transfer_id, line_id, data)
    return success_response(TransferLineResponse.model_validate(line), "Line updated")


@router.delete("/{transfer_id}/lines/{line_id}", response_model=ApiResponse[None])
@limiter.limit("30/minute")
def delete_transfer_line(
    request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int, line_id: int
):
    TransferService(db).delete_line(transfer_id, line_id)
    return success_response(message="Line deleted")


@router.post("/{transfer_id}/complete", response_model=ApiResponse[CompletionResponse])
@limiter.limit("30/minute")
def complete_transfer(request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int):
    """Move the goods: the source loses and the destination gains each line's quantity."""
    result = TransferService(db).complete(transfer_id, completed_by=current_user.user_id)
    return success_response(result, "Transfer completed")


@router.post("/{transfer_id}/cancel", response_model=ApiResponse[TransferResponse])
@limiter.limit("30/minute")
def cancel_transfer(request: Request, db: DbSession, current_user: CurrentUser, transfer_id: int):
    transfer = TransferService(db).cancel(transfer_id)
    return success_response(TransferResponse.model_validate(transfer), "Transfer canceled")
