"""
Protocols for Plan Gateway Service.

Defines the interfaces used for dependency injection. The handler depends on
these protocols, not on concrete implementations, so tests can swap the
upstream for an in-process fake.
"""

from __future__ import annotations

from typing import Protocol

from prometheus_client import Counter, Histogram

from services.plan_gateway_service.internal_models import UpstreamRequest, UpstreamResponse


class UpstreamClientProtocol(Protocol):
    """Protocol for the chat-completion upstream."""

    async def send(
        self,
        upstream_request: UpstreamRequest,
        *,
        request_id: str,
        timeout: float,
    ) -> UpstreamResponse:
        """Perform the single upstream call for a request.

        Non-2xx replies are returned, not raised; transport failures raise
        GatewayError (timeout_error or proxy_error).
        """
        ...


class MetricsProtocol(Protocol):
    """Protocol for metrics collection matching GatewayMetrics exactly."""

    @property
    def http_requests_total(self) -> Counter:
        """Total HTTP requests counter."""
        ...

    @property
    def http_request_duration_seconds(self) -> Histogram:
        """HTTP request duration histogram."""
        ...

    @property
    def upstream_calls_total(self) -> Counter:
        """Upstream calls counter."""
        ...

    @property
    def upstream_call_duration_seconds(self) -> Histogram:
        """Upstream call duration histogram."""
        ...

    @property
    def api_errors_total(self) -> Counter:
        """API errors counter."""
        ...

    @property
    def deadline_expirations_total(self) -> Counter:
        """Requests answered by the deadline timer."""
        ...
