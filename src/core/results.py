"""Uniform response envelope returned by every learning operation."""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from src.core.errors import ErrorCode, LearningError


T = TypeVar("T")

GENERIC_FAILURE_MESSAGE = "Terjadi kesalahan. Silakan coba lagi."


class ActionResult(BaseModel, Generic[T]):
    """``{success, data, error, code, field_errors}`` envelope."""

    success: bool = Field(description="Whether the operation succeeded")
    data: T | None = Field(default=None, description="Operation payload")
    error: str | None = Field(default=None, description="User-facing error message")
    code: ErrorCode | None = Field(default=None, description="Error kind")
    field_errors: dict[str, list[str]] | None = Field(
        default=None, description="Per-field validation messages"
    )

    @classmethod
    def ok(cls, data: T | None = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: LearningError) -> "ActionResult[T]":
        return cls(
            success=False,
            error=error.message,
            code=error.code,
            field_errors=error.field_errors,
        )

    @classmethod
    def internal_error(cls) -> "ActionResult[T]":
        return cls(
            success=False,
            error=GENERIC_FAILURE_MESSAGE,
            code=ErrorCode.INTERNAL_ERROR,
        )
