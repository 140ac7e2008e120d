"""HTTP client for the upstream chat-completion API.

Wraps a shared httpx AsyncClient. The per-call timeout is whatever remains
of the request deadline, so a transport timeout never outlives the gateway's
own deadline.
"""

from __future__ import annotations

import time

import httpx
from gateway_service_libs.error_handling import raise_proxy_error, raise_timeout_error
from gateway_service_libs.error_handling.fastapi import REQUEST_ID_HEADER
from gateway_service_libs.logging_utils import create_service_logger

from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.internal_models import UpstreamRequest, UpstreamResponse

logger = create_service_logger("plan_gateway.upstream_client")


class UpstreamChatClient:
    """Sends canonical chat-completion calls upstream."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings) -> None:
        """Initialize with shared HTTP client.

        Args:
            http_client: Shared httpx AsyncClient instance
            settings: Service settings (base URL, API key, path prefix)
        """
        self._client = http_client
        self._settings = settings

    def _build_url(self, path: str) -> str:
        prefix = self._settings.PROXY_PATH_PREFIX
        if prefix and path.startswith(prefix):
            path = path[len(prefix) :]
        return self._settings.upstream_url(path)

    def _build_headers(self, request_id: str) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            REQUEST_ID_HEADER: request_id,
        }
        api_key = self._settings.reveal(self._settings.UPSTREAM_API_KEY)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    async def send(
        self,
        upstream_request: UpstreamRequest,
        *,
        request_id: str,
        timeout: float,
    ) -> UpstreamResponse:
        """POST the canonical body and return the raw reply.

        Raises:
            GatewayError: timeout_error on transport timeout, proxy_error when
                the upstream cannot be reached
        """
        url = self._build_url(upstream_request.path)
        started = time.monotonic()

        logger.debug(
            "Calling upstream",
            request_id=request_id,
            url=url,
            timeout_seconds=round(timeout, 3),
        )

        try:
            response = await self._client.post(
                url,
                json=upstream_request.body,
                headers=self._build_headers(request_id),
                timeout=httpx.Timeout(
                    timeout,
                    connect=min(timeout, self._settings.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS),
                ),
            )
        except httpx.TimeoutException as e:
            raise_timeout_error(
                service=self._settings.SERVICE_NAME,
                operation="upstream_call",
                message="Upstream request timed out",
                request_id=request_id,
                timeout_seconds=timeout,
                elapsed_seconds=time.monotonic() - started,
                details=str(e) or type(e).__name__,
                url=url,
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Upstream transport failure: {e!r}",
                request_id=request_id,
                url=url,
            )
            raise_proxy_error(
                service=self._settings.SERVICE_NAME,
                operation="upstream_call",
                message="Failed to reach upstream service",
                request_id=request_id,
                details=str(e) or type(e).__name__,
                url=url,
            )

        elapsed = time.monotonic() - started
        logger.info(
            "Upstream responded",
            request_id=request_id,
            status_code=response.status_code,
            elapsed_ms=round(elapsed * 1000),
        )
        return UpstreamResponse(
            status_code=response.status_code,
            text=response.text,
            elapsed_seconds=elapsed,
        )
