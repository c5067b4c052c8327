"""ServiceResult and ServiceError: the contract between services and callers.

INVARIANT: Every public service operation returns a ServiceResult.  The CLI
(and any HTTP layer wrapping the resolver) consumes only this type; domain
and infrastructure exceptions never cross the service boundary.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(StrEnum):
    """Stable error codes carried by :class:`ServiceError`."""

    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_PATH = "INVALID_PATH"
    NOT_FOUND = "NOT_FOUND"
    READ_FAILED = "READ_FAILED"
    UNKNOWN_BRAND = "UNKNOWN_BRAND"
    MISSING_SOURCE_DIR = "MISSING_SOURCE_DIR"
    UNKNOWN_PLATFORM = "UNKNOWN_PLATFORM"
    BUILD_FAILED = "BUILD_FAILED"


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``detail`` holds caller-facing hints such as the available token types
    for a failed lookup.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"resolve_token"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues, e.g. a directory that failed to list.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: ErrorCode,
        message: str,
        *,
        warnings: list[str] | None = None,
        **detail: Any,
    ) -> ServiceResult:
        """Build a failed result with a :class:`ServiceError`."""
        return cls(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail),
        )
