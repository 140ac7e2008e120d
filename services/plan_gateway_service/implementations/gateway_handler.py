"""Request orchestration for Plan Gateway Service.

One GatewayHandler serves every public endpoint. Each call walks a
RequestContext through the pipeline stages and ends with exactly one
response, either the (translated) upstream reply or an error body.
"""

from __future__ import annotations

import json
from typing import Any, NoReturn
from uuid import uuid4

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from gateway_service_libs.error_handling import (
    GatewayError,
    create_error_detail_with_context,
    raise_parse_error,
    raise_proxy_error,
    raise_validation_error,
)
from gateway_service_libs.error_handling.fastapi import (
    REQUEST_ID_HEADER,
    create_error_response,
    status_code_for,
)
from gateway_service_libs.logging_utils import (
    bind_request_logger,
    create_service_logger,
    truncate_for_log,
)
from pydantic import BaseModel, ValidationError

from common_core.error_enums import ErrorCode
from services.plan_gateway_service.api_models import (
    ChatCompletionRequest,
    PlanGenerationRequest,
)
from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.endpoint_registry import (
    CHAT_COMPLETION,
    EndpointSpec,
    get_endpoint_spec,
)
from services.plan_gateway_service.implementations.endpoint_translator import EndpointTranslator
from services.plan_gateway_service.implementations.response_sanitizer import ResponseSanitizer
from services.plan_gateway_service.implementations.response_validator import (
    ResponseValidator,
    format_validation_errors,
)
from services.plan_gateway_service.implementations.timeout_coordinator import TimeoutCoordinator
from services.plan_gateway_service.internal_models import (
    GatewayStage,
    RequestContext,
    TimeoutState,
    UpstreamRequest,
    UpstreamResponse,
)
from services.plan_gateway_service.protocols import MetricsProtocol, UpstreamClientProtocol

logger = create_service_logger("plan_gateway.handler")

JSON_CONTENT_TYPE = "application/json"


class GatewayHandler:
    """Drives one request from receipt to its single terminal response."""

    def __init__(
        self,
        settings: Settings,
        upstream: UpstreamClientProtocol,
        translator: EndpointTranslator,
        sanitizer: ResponseSanitizer,
        validator: ResponseValidator,
        coordinator: TimeoutCoordinator,
        metrics: MetricsProtocol,
    ) -> None:
        self._settings = settings
        self._upstream = upstream
        self._translator = translator
        self._sanitizer = sanitizer
        self._validator = validator
        self._coordinator = coordinator
        self._metrics = metrics
        self._envelope_spec = get_endpoint_spec(CHAT_COMPLETION)

    async def handle(self, request: Request, endpoint_key: str) -> Response:
        spec = get_endpoint_spec(endpoint_key)
        request_id = str(getattr(request.state, "request_id", None) or uuid4())
        logical_path = request.url.path

        ctx = RequestContext(
            request_id=request_id,
            logical_path=logical_path,
            endpoint_key=endpoint_key,
            log=bind_request_logger(logger, request_id, path=logical_path),
        )
        state = self._coordinator.begin(request_id)
        ctx.log.info(
            f"Incoming request to {logical_path}",
            method=request.method,
            endpoint=endpoint_key,
            content_length=request.headers.get("content-length"),
            user_agent=request.headers.get("user-agent"),
        )

        try:
            # The body is read under the same deadline as the upstream call
            ctx.raw_body = await self._coordinator.within_deadline(state, request.body())
            response = await self._process(ctx, spec, state, request.headers.get("content-type"))
        except GatewayError as e:
            response = self._error_response(ctx, spec, e)
        except Exception as e:
            ctx.log.error(f"Unexpected error while handling request: {e!r}", exc_info=True)
            error_detail = create_error_detail_with_context(
                error_code=ErrorCode.INTERNAL_ERROR,
                message="An unexpected error occurred",
                service=self._settings.SERVICE_NAME,
                operation="handle_request",
                request_id=request_id,
                details=str(e) or type(e).__name__,
                capture_stack=True,
            )
            response = self._error_response(ctx, spec, GatewayError(error_detail))
        finally:
            self._coordinator.release(state)

        ctx.advance(GatewayStage.RESPONDED)
        duration = ctx.elapsed_seconds()
        self._metrics.http_requests_total.labels(
            method=request.method, endpoint=spec.key, http_status=str(response.status_code)
        ).inc()
        self._metrics.http_request_duration_seconds.labels(
            method=request.method, endpoint=spec.key
        ).observe(duration)
        ctx.log.info(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round(duration * 1000),
        )
        return response

    async def _process(
        self,
        ctx: RequestContext,
        spec: EndpointSpec,
        state: TimeoutState,
        content_type: str | None,
    ) -> Response:
        ctx.advance(GatewayStage.TRANSLATING)
        body = self._parse_inbound(ctx, spec, content_type)
        upstream_path, upstream_body = self._translator.forward(ctx.logical_path, body)

        ctx.advance(GatewayStage.CALLING_UPSTREAM)
        upstream_request = UpstreamRequest(path=upstream_path, body=upstream_body)
        upstream_response: UpstreamResponse = await self._coordinator.run_upstream(
            state,
            lambda: self._upstream.send(
                upstream_request,
                request_id=ctx.request_id,
                timeout=self._coordinator.remaining(state),
            ),
        )
        self._metrics.upstream_calls_total.labels(
            endpoint=spec.key, status_code=str(upstream_response.status_code)
        ).inc()
        self._metrics.upstream_call_duration_seconds.labels(endpoint=spec.key).observe(
            upstream_response.elapsed_seconds
        )
        if not upstream_response.ok:
            self._raise_upstream_status(ctx, upstream_response)

        ctx.advance(GatewayStage.SANITIZING)
        envelope = self._sanitizer.sanitize(
            upstream_response.text, ctx.request_id, strip_fences=False, status_code=500
        )

        ctx.advance(GatewayStage.VALIDATING)
        self._validator.validate(envelope, self._envelope_spec, ctx.request_id)

        ctx.advance(GatewayStage.TRANSLATING_BACK)
        result = self._translator.backward(ctx.logical_path, envelope, ctx.request_id)
        if spec.specialized:
            self._validator.validate(result, spec, ctx.request_id)
            status_code = 200
        else:
            status_code = upstream_response.status_code

        return JSONResponse(
            content=result,
            status_code=status_code,
            headers={REQUEST_ID_HEADER: ctx.request_id},
        )

    def _parse_inbound(
        self, ctx: RequestContext, spec: EndpointSpec, content_type: str | None
    ) -> dict[str, Any]:
        """Decode and check the client body; returns it as sent."""
        media_type = (content_type or "").split(";", 1)[0].strip().lower()
        if media_type != JSON_CONTENT_TYPE:
            raise_parse_error(
                service=self._settings.SERVICE_NAME,
                operation="parse_request",
                message="Request body must be sent as application/json",
                request_id=ctx.request_id,
                details=f"Unsupported Content-Type: {content_type or 'missing'}",
            )

        body: Any = {}
        if ctx.raw_body.strip():
            try:
                body = json.loads(ctx.raw_body)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                ctx.log.warning(
                    "Invalid JSON in request body",
                    error=str(e),
                    body_excerpt=truncate_for_log(
                        ctx.raw_body, self._settings.MAX_LOG_EXCERPT_CHARS
                    ),
                )
                raise_parse_error(
                    service=self._settings.SERVICE_NAME,
                    operation="parse_request",
                    message="Invalid JSON in request body",
                    request_id=ctx.request_id,
                    details=str(e),
                )

        if not isinstance(body, dict):
            raise_validation_error(
                service=self._settings.SERVICE_NAME,
                operation="validate_request",
                message="Request body must be a JSON object",
                request_id=ctx.request_id,
                details=f"Got {type(body).__name__}",
                status_code=400,
            )

        model: type[BaseModel] = (
            PlanGenerationRequest if spec.specialized else ChatCompletionRequest
        )
        try:
            model.model_validate(body)
        except ValidationError as e:
            raise_validation_error(
                service=self._settings.SERVICE_NAME,
                operation="validate_request",
                message=f"Invalid request body for {spec.key}",
                request_id=ctx.request_id,
                details=format_validation_errors(e),
                status_code=400,
            )
        return body

    def _raise_upstream_status(
        self, ctx: RequestContext, upstream_response: UpstreamResponse
    ) -> NoReturn:
        message = f"Upstream service returned status {upstream_response.status_code}"
        try:
            payload = json.loads(upstream_response.text)
        except json.JSONDecodeError:
            payload = None
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            upstream_message = payload["error"].get("message")
            if isinstance(upstream_message, str) and upstream_message:
                message = upstream_message

        ctx.log.warning(
            "Upstream returned error status",
            status_code=upstream_response.status_code,
            body_excerpt=truncate_for_log(
                upstream_response.text, self._settings.MAX_LOG_EXCERPT_CHARS
            ),
        )
        raise_proxy_error(
            service=self._settings.SERVICE_NAME,
            operation="upstream_call",
            message=message,
            request_id=ctx.request_id,
            details=truncate_for_log(upstream_response.text, self._settings.MAX_LOG_EXCERPT_CHARS),
            status_code=upstream_response.status_code,
        )

    def _error_response(
        self, ctx: RequestContext, spec: EndpointSpec, error: GatewayError
    ) -> JSONResponse:
        ctx.advance(GatewayStage.ERROR)
        error_detail = error.error_detail
        status_code = status_code_for(error_detail)

        log_method = ctx.log.error if status_code >= 500 else ctx.log.warning
        log_method(
            f"Request failed: {error_detail.message}",
            error_code=error.error_code,
            operation=error_detail.operation,
            status_code=status_code,
            details=truncate_for_log(error_detail.details, self._settings.MAX_LOG_EXCERPT_CHARS),
            duration_ms=round(ctx.elapsed_seconds() * 1000),
            context=error_detail.context,
        )

        self._metrics.api_errors_total.labels(
            endpoint=spec.key, error_type=error.error_code
        ).inc()
        if (
            error_detail.error_code is ErrorCode.TIMEOUT_ERROR
            and error_detail.operation == "enforce_deadline"
        ):
            self._metrics.deadline_expirations_total.labels(endpoint=spec.key).inc()

        return create_error_response(error_detail)
