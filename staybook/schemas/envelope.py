"""Uniform response envelope: every endpoint returns {code, message, result}."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Response wrapper; code mirrors the HTTP status of the response."""

    code: int = Field(..., description="Numeric status code (same as HTTP status).")
    message: str = Field(..., description="Human-readable outcome message.")
    result: T | None = Field(default=None, description="Typed payload, null on errors.")
