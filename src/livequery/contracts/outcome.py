from __future__ import annotations
"""Result envelope and message types for adapter-level operations."""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Message(BaseModel):
    """A message (error or warning) from a replay or CLI step."""

    code: str = Field(..., description="Machine-readable error/warning code")
    message: str = Field(..., description="Human-readable message")
    context: dict[str, Any] = Field(
        default_factory=dict, description="Additional context for debugging"
    )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class Outcome(BaseModel, Generic[T]):
    """Standard output envelope for operations outside the engine core."""

    ok: bool = Field(..., description="Whether the operation was successful")
    data: Optional[T] = Field(default=None, description="The result data (if ok)")
    errors: list[Message] = Field(default_factory=list)
    warnings: list[Message] = Field(default_factory=list)
    trace: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: T,
        warnings: Optional[list[Message]] = None,
        trace: Optional[dict[str, Any]] = None,
    ) -> "Outcome[T]":
        return cls(ok=True, data=data, warnings=warnings or [], trace=trace or {})

    @classmethod
    def failure(
        cls,
        errors: list[Message],
        warnings: Optional[list[Message]] = None,
        trace: Optional[dict[str, Any]] = None,
    ) -> "Outcome[T]":
        return cls(ok=False, data=None, errors=errors, warnings=warnings or [], trace=trace or {})


def err(code: str, message: str, **context: Any) -> Message:
    """Helper to create an error message."""
    return Message(code=code, message=message, context=context)


def warn(code: str, message: str, **context: Any) -> Message:
    """Helper to create a warning message."""
    return Message(code=code, message=message, context=context)
