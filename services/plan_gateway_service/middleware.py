"""Plan Gateway Service middleware components."""

from __future__ import annotations

from uuid import uuid4

from fastapi import Request
from gateway_service_libs.error_handling.fastapi import REQUEST_ID_HEADER
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

MAX_REQUEST_ID_LENGTH = 128


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Middleware to ensure every request has a request ID.

    An inbound ``X-Request-ID`` is honoured when it is a short printable
    token; otherwise a fresh UUID is generated.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Extract or generate the request ID and store it in request state."""
        x_request_id = request.headers.get(REQUEST_ID_HEADER, "").strip()
        if (
            x_request_id
            and len(x_request_id) <= MAX_REQUEST_ID_LENGTH
            and x_request_id.isprintable()
        ):
            request_id = x_request_id
        else:
            request_id = str(uuid4())

        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
