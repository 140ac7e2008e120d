"""Error handling utilities for gateway services."""

from .error_detail_factory import create_error_detail_with_context
from .factories import (
    raise_parse_error,
    raise_proxy_error,
    raise_timeout_error,
    raise_translation_error,
    raise_validation_error,
)
from .gateway_error import GatewayError

__all__ = [
    "GatewayError",
    "create_error_detail_with_context",
    "raise_parse_error",
    "raise_proxy_error",
    "raise_timeout_error",
    "raise_translation_error",
    "raise_validation_error",
]
