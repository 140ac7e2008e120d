"""
Plan Gateway Common Core Package.
"""

from .config_enums import EndpointKind, Environment
from .error_enums import ERROR_STATUS_CODES, ErrorCode
from .models.error_models import ErrorDetail

__all__ = [
    "ERROR_STATUS_CODES",
    "EndpointKind",
    "Environment",
    "ErrorCode",
    "ErrorDetail",
]
