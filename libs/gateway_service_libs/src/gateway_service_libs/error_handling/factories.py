"""Factory functions raising GatewayError for each taxonomy entry.

Every factory builds an ErrorDetail and raises; none of them return.
Keyword arguments beyond the named ones are kept as structured context
for the log entry.
"""

from __future__ import annotations

from typing import Any, NoReturn

from common_core.error_enums import ErrorCode

from .error_detail_factory import create_error_detail_with_context
from .gateway_error import GatewayError


def _raise(
    error_code: ErrorCode,
    service: str,
    operation: str,
    message: str,
    request_id: str,
    details: str,
    status_code: int | None,
    context: dict[str, Any],
) -> NoReturn:
    error_detail = create_error_detail_with_context(
        error_code=error_code,
        message=message,
        service=service,
        operation=operation,
        request_id=request_id,
        details=details,
        context=context,
        status_code=status_code,
    )
    raise GatewayError(error_detail)


def raise_parse_error(
    service: str,
    operation: str,
    message: str,
    request_id: str,
    details: str = "",
    status_code: int | None = None,
    **context: Any,
) -> NoReturn:
    """Malformed inbound JSON or upstream text with no recoverable JSON."""
    _raise(
        ErrorCode.PARSE_ERROR,
        service,
        operation,
        message,
        request_id,
        details,
        status_code,
        context,
    )


def raise_timeout_error(
    service: str,
    operation: str,
    message: str,
    request_id: str,
    timeout_seconds: float,
    elapsed_seconds: float,
    details: str = "",
    **context: Any,
) -> NoReturn:
    """Deadline exceeded, locally or at the upstream transport."""
    context = {
        "timeout_seconds": timeout_seconds,
        "elapsed_ms": round(elapsed_seconds * 1000),
        **context,
    }
    _raise(
        ErrorCode.TIMEOUT_ERROR, service, operation, message, request_id, details, None, context
    )


def raise_proxy_error(
    service: str,
    operation: str,
    message: str,
    request_id: str,
    details: str = "",
    status_code: int | None = None,
    **context: Any,
) -> NoReturn:
    """Upstream unreachable, or upstream answered with a non-success status."""
    _raise(
        ErrorCode.PROXY_ERROR,
        service,
        operation,
        message,
        request_id,
        details,
        status_code,
        context,
    )


def raise_translation_error(
    service: str,
    operation: str,
    message: str,
    request_id: str,
    details: str = "",
    **context: Any,
) -> NoReturn:
    """A specialized reply could not be mapped back to its domain shape."""
    _raise(
        ErrorCode.TRANSLATION_ERROR, service, operation, message, request_id, details, None, context
    )


def raise_validation_error(
    service: str,
    operation: str,
    message: str,
    request_id: str,
    details: str = "",
    status_code: int | None = None,
    **context: Any,
) -> NoReturn:
    """Well-formed JSON that lacks required structure."""
    _raise(
        ErrorCode.VALIDATION_ERROR,
        service,
        operation,
        message,
        request_id,
        details,
        status_code,
        context,
    )

