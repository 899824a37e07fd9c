"""ServiceResult and ServiceError — what every service call hands back.

INVARIANT: All service-layer methods return ServiceResult; store
exceptions never cross the service boundary.  The CLI (and any other
adapter) renders this one shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``code`` is one of ``VALIDATION_FAILED``, ``DUPLICATE_ENTRY``,
    ``NOT_FOUND``, ``MALFORMED_INPUT``, ``STORE_FAILURE``,
    ``TRANSPORT_ERROR`` or, for a multi-list sync whose lists failed for
    different reasons, ``SYNC_PARTIAL``.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"merge_backend_list"``).
        data: Operation-specific payload on success (and partial-success
            details such as skipped entries).
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (timing, counts, etc.).
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
        data: dict[str, Any] | None = None,
        warnings: list[str] | None = None,
    ) -> ServiceResult:
        """Shorthand for an ``ok=False`` result."""
        return cls(
            ok=False,
            op=op,
            data=data or {},
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )
