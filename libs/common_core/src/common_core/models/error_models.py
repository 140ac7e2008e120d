"""Structured error detail shared by every gateway component."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from common_core.error_enums import ErrorCode


class ErrorDetail(BaseModel):
    """Everything needed to log an error and render it to the client.

    ``details`` is the short human-readable string that goes on the wire;
    ``context`` holds structured diagnostics that are only ever logged.
    """

    model_config = ConfigDict(frozen=True)

    error_code: ErrorCode
    message: str
    request_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    service: str
    operation: str
    details: str = ""
    context: dict[str, Any] = Field(default_factory=dict)
    status_code: int | None = Field(
        default=None,
        description="Explicit HTTP status; falls back to the error code's default when unset",
    )
    stack_trace: str | None = None
