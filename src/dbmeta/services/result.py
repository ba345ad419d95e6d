"""ServiceResult and ServiceError — the contract between services and the CLI.

Every public service method returns a ServiceResult instead of raising.
The CLI renders it (human, quiet or JSON) and maps ``ok`` to the exit code.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Return type of every service operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Operation name (``"export_scripts"``, ``"update_db"``, ...).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans in verbose mode).
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
        code: str,
        message: str,
        *,
        detail: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Shorthand for a failed result carrying one ServiceError."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
            warnings=warnings or [],
        )
