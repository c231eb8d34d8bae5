"""Envelope, pagination and shared field types."""

from decimal import Decimal
from typing import Annotated, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, PlainSerializer

T = TypeVar("T")

# Quantities stay Decimal in Python and are emitted as JSON numbers.
Quantity = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: ``{"success": true, "message": ..., "data": ...}``."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class ErrorResponse(BaseModel):
    """Error envelope: ``{"success": false, "message": ...}``."""

    success: bool = False
    message: str


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: List[T]
    total: int = Field(description="Total number of items matching the query")
    skip: int = Field(description="Number of items skipped")
    limit: int = Field(description="Maximum items requested")
    has_more: bool = Field(description="Whether more items are available")
