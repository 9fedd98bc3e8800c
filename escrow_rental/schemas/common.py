"""Response envelopes shared by every router."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Standard error body for domain exceptions (4xx)."""

    detail: str = Field(..., description="Human-readable error message")
    code: str = Field(..., description="Machine-readable error code, e.g. INVALID_STATE")


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a listing plus the total number of matches."""

    items: list[T]
    total: int
    page: int
    page_size: int
