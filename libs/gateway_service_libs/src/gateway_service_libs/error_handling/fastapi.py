"""FastAPI integration: error body rendering and exception handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import uuid4

from common_core.error_enums import ERROR_STATUS_CODES, ErrorCode
from common_core.models.error_models import ErrorDetail
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import Request

from gateway_service_libs.logging_utils import create_service_logger

from .error_detail_factory import create_error_detail_with_context
from .gateway_error import GatewayError

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = create_service_logger("gateway_service_libs.error_handling")

REQUEST_ID_HEADER = "X-Request-ID"


def build_error_body(error_detail: ErrorDetail) -> dict[str, Any]:
    """Client-facing error envelope.

    ``type`` and ``code`` always carry the same taxonomy value.
    """
    return {
        "error": {
            "message": error_detail.message,
            "type": error_detail.error_code.value,
            "code": error_detail.error_code.value,
            "details": error_detail.details,
            "requestId": error_detail.request_id,
        }
    }


def status_code_for(error_detail: ErrorDetail) -> int:
    if error_detail.status_code is not None:
        return error_detail.status_code
    return ERROR_STATUS_CODES[error_detail.error_code]


def create_error_response(error_detail: ErrorDetail) -> JSONResponse:
    """Render an ErrorDetail as the JSON error response."""
    return JSONResponse(
        status_code=status_code_for(error_detail),
        content=build_error_body(error_detail),
        headers={REQUEST_ID_HEADER: error_detail.request_id},
    )


def _request_id_from(request: Request) -> str:
    return str(getattr(request.state, "request_id", None) or uuid4())


def register_error_handlers(app: FastAPI) -> None:
    """Register backstop handlers for errors raised outside the gateway handler."""

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.error(
            f"GatewayError: {exc.error_detail.message}",
            request_id=exc.request_id,
            error_code=exc.error_code,
            path=request.url.path,
        )
        return create_error_response(exc.error_detail)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unrouted paths and wrong methods never reach the gateway handler
        request_id = _request_id_from(request)
        error_code = ErrorCode.PROXY_ERROR if exc.status_code < 500 else ErrorCode.INTERNAL_ERROR
        error_detail = create_error_detail_with_context(
            error_code=error_code,
            message=str(exc.detail),
            service=app.title,
            operation="route_request",
            request_id=request_id,
            details=f"{request.method} {request.url.path}",
            status_code=exc.status_code,
        )
        logger.warning(
            f"HTTP {exc.status_code}: {exc.detail}",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        response = create_error_response(error_detail)
        if exc.headers:
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        request_id = _request_id_from(request)
        error_detail = create_error_detail_with_context(
            error_code=ErrorCode.VALIDATION_ERROR,
            message="Request validation failed",
            service=app.title,
            operation="request_validation",
            request_id=request_id,
            details=str(exc.errors()),
            status_code=400,
        )
        logger.warning("Request validation failed", request_id=request_id, path=request.url.path)
        return create_error_response(error_detail)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        request_id = _request_id_from(request)
        logger.error(
            f"Unexpected error: {exc}",
            request_id=request_id,
            path=request.url.path,
            exc_info=True,
        )
        error_detail = create_error_detail_with_context(
            error_code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
            service=app.title,
            operation="unhandled_exception",
            request_id=request_id,
            details=str(exc) or type(exc).__name__,
        )
        return create_error_response(error_detail)
