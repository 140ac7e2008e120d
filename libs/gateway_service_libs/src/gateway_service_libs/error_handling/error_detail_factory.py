"""Factory for ErrorDetail instances with automatic context capture."""

from __future__ import annotations

import sys
import traceback
from typing import Any
from uuid import uuid4

from common_core.error_enums import ErrorCode
from common_core.models.error_models import ErrorDetail


def create_error_detail_with_context(
    error_code: ErrorCode,
    message: str,
    service: str,
    operation: str,
    request_id: str | None = None,
    details: str = "",
    context: dict[str, Any] | None = None,
    status_code: int | None = None,
    capture_stack: bool = False,
) -> ErrorDetail:
    """Create an ErrorDetail, filling in what the caller did not provide.

    Args:
        error_code: Taxonomy entry for the failure
        message: Short client-visible message
        service: Service raising the error
        operation: Operation that failed
        request_id: Request identity; generated when absent
        details: Client-visible diagnostic string
        context: Structured diagnostics, logged but never sent to the client
        status_code: Explicit HTTP status overriding the code's default
        capture_stack: Attach the active (or current) stack trace

    Returns:
        Frozen ErrorDetail
    """
    stack_trace = None
    if capture_stack:
        if sys.exc_info()[0] is not None:
            stack_trace = traceback.format_exc()
        else:
            stack_trace = "".join(traceback.format_stack()[:-1])

    return ErrorDetail(
        error_code=error_code,
        message=message,
        request_id=request_id or str(uuid4()),
        service=service,
        operation=operation,
        details=details,
        context=context or {},
        status_code=status_code,
        stack_trace=stack_trace,
    )
