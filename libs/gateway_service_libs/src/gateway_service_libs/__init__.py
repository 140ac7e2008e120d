"""
Plan Gateway Service Libraries Package.

Shared infrastructure for the gateway services: structured logging,
settings base class and the error handling framework.
"""

from .logging_utils import configure_service_logging, create_service_logger

__all__ = [
    "configure_service_logging",
    "create_service_logger",
]

# Framework-specific error handlers should be imported directly from:
# - gateway_service_libs.error_handling.fastapi
