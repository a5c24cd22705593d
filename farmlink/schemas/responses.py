"""Success and error envelopes shared by every endpoint."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class SuccessResponse(BaseModel, Generic[T]):
    """``{"success": true, "data": ..., "message"?}``."""

    success: bool = True
    data: T
    message: str | None = None


class ErrorDetail(BaseModel):
    """A single field-level or contextual error detail."""

    field: str | None = None
    message: str


class ErrorResponse(BaseModel):
    """Error envelope; ``error`` holds the stable error code."""

    error: str
    message: str
    details: list[ErrorDetail] = []
    request_id: str = Field(alias="requestId")
    stack: str | None = None

    model_config = {"populate_by_name": True}


class PageMeta(BaseModel):
    """Offset pagination counters for list payloads."""

    total: int
    limit: int
    offset: int
