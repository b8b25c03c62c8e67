"""
Schemas shared across endpoints: pagination and the error envelope.
"""

import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")


class PaginationParams(BaseModel):
    """?page=&page_size= query parameters (1-indexed, at most 100 per page)."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginationMeta(BaseModel):
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(cls, total: int, pagination: PaginationParams) -> "PaginationMeta":
        return cls(
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=math.ceil(total / pagination.page_size),
        )


class PaginatedResponse(BaseModel, Generic[DataT]):
    data: list[DataT]
    meta: PaginationMeta


class ErrorDetail(BaseModel):
    code: str = Field(description="Machine-readable code, e.g. INVALID_CREDENTIALS")
    message: str
    details: Any = None


class ErrorMeta(BaseModel):
    request_id: str | None = None


class ErrorResponse(BaseModel):
    """Envelope returned by every non-2xx response (see core.handlers)."""

    error: ErrorDetail
    meta: ErrorMeta


# Documented on every /api route
ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: {"model": ErrorResponse, "description": description}
    for status, description in (
        (401, "Missing, invalid or expired credentials or session"),
        (403, "Not permitted, or no profile for a federated identity"),
        (422, "Request validation failed"),
        (429, "Rate limit exceeded"),
        (503, "Credential, profile or session store unavailable"),
    )
}
