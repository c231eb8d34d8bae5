"""Schemas shared by all operation types."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from stockflow.models.operation import OPEN_STATUSES, OperationStatus


class OperationUpdateBase(BaseModel):
    """Editable header fields common to every operation."""

    reference: Optional[str] = Field(default=None, min_length=1, max_length=50)
    notes: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[OperationStatus] = None

    @field_validator("status")
    @classmethod
    def status_must_stay_open(cls, v: Optional[OperationStatus]) -> Optional[OperationStatus]:
        # done/canceled are reached only through the complete/cancel actions
        if v is not None and v not in OPEN_STATUSES:
            raise ValueError("status can only be set to draft, waiting or ready")
        return v
