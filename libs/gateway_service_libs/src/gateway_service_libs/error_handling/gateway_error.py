"""Core exception type carried through every gateway stage."""

from __future__ import annotations

from common_core.error_enums import ERROR_STATUS_CODES
from common_core.models.error_models import ErrorDetail


class GatewayError(Exception):
    """Exception wrapping a structured :class:`ErrorDetail`.

    Stages raise it through the ``raise_*`` factories; the gateway handler
    catches it at its boundary and turns ``error_detail`` into the single
    error response written for the request.
    """

    def __init__(self, error_detail: ErrorDetail) -> None:
        self.error_detail = error_detail
        super().__init__(f"[{error_detail.error_code.value}] {error_detail.message}")

    @property
    def request_id(self) -> str:
        return self.error_detail.request_id

    @property
    def error_code(self) -> str:
        return self.error_detail.error_code.value

    @property
    def service(self) -> str:
        return self.error_detail.service

    @property
    def operation(self) -> str:
        return self.error_detail.operation

    @property
    def status_code(self) -> int:
        """Explicit status when one was set, else the error code's default."""
        if self.error_detail.status_code is not None:
            return self.error_detail.status_code
        return ERROR_STATUS_CODES[self.error_detail.error_code]

    def __repr__(self) -> str:
        return (
            f"GatewayError(error_code={self.error_code!r}, "
            f"message={self.error_detail.message!r}, request_id={self.request_id!r})"
        )
