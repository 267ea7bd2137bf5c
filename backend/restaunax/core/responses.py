"""Envelope models for API responses.

Successes are ``{"data": ...}``; failures are
``{"error": {"code", "message", "details"}}``.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Success envelope around an entity, a list or an acknowledgment."""

    data: T


class MessageData(BaseModel):
    """Acknowledgment for mutations that return no entity."""

    message: str


class ErrorDetail(BaseModel):
    """Body of the error envelope.

    Attributes:
        code: Stable machine-readable code.
        message: Human-readable description.
        details: Per-field problems, for validation failures.
    """

    code: str
    message: str
    details: list[dict[str, Any]] | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
