"""Delivery routes - outgoing goods from a warehouse."""

from typing import Optional

from fastapi import APIRouter, Query, Request

from stockflow.core.rate_limit import limiter
from stockflow.core.rbac import CurrentUser
from stockflow.core.responses import paginated_response, success_response
from stockflow.db.session import DbSession
from stockflow.models.operation import OperationStatus
from stockflow.schemas.common import ApiResponse, PaginatedResponse
from stockflow.schemas.delivery import (
    DeliveryCreate,
    DeliveryLineCreate,
    DeliveryLineResponse,
    DeliveryLineUpdate,
    DeliveryResponse,
    DeliveryUpdate,
)
from stockflow.schemas.stock import CompletionResponse
from stockflow.services.delivery_service import DeliveryService

router = APIRouter()


@router.post("/", response_model=ApiResponse[DeliveryResponse], status_code=201)
@limiter.limit("30/minute")
def create_delivery(request: Request, db: DbSession, current_user: CurrentUser, data: DeliveryCreate):
    """Create a delivery in draft."""
    delivery = DeliveryService(db).create(data, created_by=current_user.user_id)
    return success_response(DeliveryResponse.model_validate(delivery), "Delivery created")


@router.get("/", response_model=ApiResponse[PaginatedResponse[DeliveryResponse]])
@limiter.limit("60/minute")
def list_deliveries(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    status_filter: Optional[OperationStatus] = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    deliveries, total = DeliveryService(db).list_operations(status_filter, skip, limit)
    items = [DeliveryResponse.model_validate(d) for d in deliveries]
    return success_response(paginated_response(items, total, skip, limit))


@router.get("/{delivery_id}", response_model=ApiResponse[DeliveryResponse])
@limiter.limit("60/minute")
def get_delivery(request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int):
    delivery = DeliveryService(db).get(delivery_id)
    return success_response(DeliveryResponse.model_validate(delivery))


@router.put("/{delivery_id}", response_model=ApiResponse[DeliveryResponse])
@limiter.limit("30/minute")
def update_delivery(
    request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int, data: DeliveryUpdate
):
    delivery = DeliveryService(db).update(delivery_id, data)
    return success_response(DeliveryResponse.model_validate(delivery), "Delivery updated")


@router.post("/{delivery_id}/lines", response_model=ApiResponse[DeliveryLineResponse], status_code=201)
@limiter.limit("30/minute")
def add_delivery_line(
    request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int, data: DeliveryLineCreate
):
    line = DeliveryService(db).add_line(delivery_id, data)
    return success_response(DeliveryLineResponse.model_validate(line), "Line added")


@router.put("/{delivery_id}/lines/{line_id}", response_model=ApiResponse[DeliveryLineResponse])
@limiter.limit("30/minute")
def update_delivery_line(
    request: Request,
    db: DbSession,
    current_user: CurrentUser,
    delivery_id: int,
    line_id: int,
    data: DeliveryLineUpdate,
):
    line = DeliveryService(db).update_line(delivery_id, line_id, data)
    return success_response(DeliveryLineResponse.model_validate(line), "Line updated")


@router.delete("/{delivery_id}/lines/{line_id}", response_model=ApiResponse[None])
@limiter.limit("30/minute")
def delete_delivery_line(
    request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int, line_id: int
):
    DeliveryService(db).delete_line(delivery_id, line_id)
    return success_response(message="Line deleted")


@router.post("/{delivery_id}/ship", response_model=ApiResponse[CompletionResponse])
@limiter.limit("30/minute")
def ship_delivery(request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int):
    """Ship the goods: stock goes down by each line's picked quantity."""
    result = DeliveryService(db).complete(delivery_id, completed_by=current_user.user_id)
    return success_response(result, "Delivery shipped")


@router.post("/{delivery_id}/cancel", response_model=ApiResponse[DeliveryResponse])
@limiter.limit("30/minute")
def cancel_delivery(request: Request, db: DbSession, current_user: CurrentUser, delivery_id: int):
    delivery = DeliveryService(db).cancel(delivery_id)
    return success_response(DeliveryResponse.model_validate(delivery), "Delivery canceled")
