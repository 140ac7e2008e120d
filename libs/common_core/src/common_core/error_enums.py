"""
common_core.error_enums - Centralized error code definitions.
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Client-visible error taxonomy of the plan gateway.

    The enum value is written verbatim into both ``error.type`` and
    ``error.code`` of the gateway error body.
    """

    PARSE_ERROR = "parse_error"  # Malformed inbound JSON or unrecoverable upstream text
    TIMEOUT_ERROR = "timeout_error"  # Deadline exceeded locally or upstream
    PROXY_ERROR = "proxy_error"  # Upstream unreachable or rejected the call
    TRANSLATION_ERROR = "translation_error"  # Specialized reply could not be mapped back
    VALIDATION_ERROR = "validation_error"  # Well-formed JSON missing required structure
    INTERNAL_ERROR = "internal_error"  # Anything uncategorized


ERROR_STATUS_CODES: dict[ErrorCode, int] = {
    ErrorCode.PARSE_ERROR: 400,
    ErrorCode.TIMEOUT_ERROR: 504,
    ErrorCode.PROXY_ERROR: 500,
    ErrorCode.TRANSLATION_ERROR: 500,
    ErrorCode.VALIDATION_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}
