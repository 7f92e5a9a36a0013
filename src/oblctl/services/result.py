"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: Every service-layer command returns ServiceResult.
The CLI and MCP adapter consume this type.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from oblctl.domain.errors import OblctlError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult.

    ``kind`` separates failures the caller can correct (``"client"``)
    from ledger outages (``"server"``).
    """

    model_config = {"frozen": True}

    code: str
    message: str
    kind: Literal["client", "server"] = "client"
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: OblctlError, **detail: Any) -> ServiceError:
        return cls(
            code=exc.code,
            message=exc.message,
            kind="client" if exc.client_error else "server",
            detail=detail,
        )


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"issue_obligation"``).
        data: Operation-specific payload on success.
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
    def failure(cls, op: str, exc: OblctlError, **detail: Any) -> ServiceResult:
        return cls(ok=False, op=op, error=ServiceError.from_exception(exc, **detail))

    @property
    def server_error(self) -> bool:
        return self.error is not None and self.error.kind == "server"
