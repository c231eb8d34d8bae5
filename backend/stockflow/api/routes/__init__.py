"""API routes."""

from fastapi import APIRouter

from stockflow.api.routes import adjustments, deliveries, receipts, stock, transfers
from stockflow.schemas.common import ErrorResponse

api_router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)

# Operations
api_router.include_router(receipts.router, prefix="/receipts", tags=["receipts"])
api_router.include_router(deliveries.router, prefix="/deliveries", tags=["deliveries"])
api_router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])
api_router.include_router(adjustments.router, prefix="/adjustments", tags=["adjustments"])

# Balances and ledger
api_router.include_router(stock.router, prefix="/stock", tags=["stock"])
