"""Metrics definitions for the Plan Gateway Service."""

from __future__ import annotations

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram


class GatewayMetrics:
    """A container for all Prometheus metrics for the Plan Gateway Service."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics with optional registry for test isolation."""
        if registry is None:
            registry = REGISTRY
        self.http_requests_total = Counter(
            "plan_gateway_http_requests_total",
            "Total number of HTTP requests for Plan Gateway Service.",
            ["method", "endpoint", "http_status"],
            registry=registry,
        )
        self.http_request_duration_seconds = Histogram(
            "plan_gateway_http_request_duration_seconds",
            "HTTP request duration in seconds for Plan Gateway Service.",
            ["method", "endpoint"],
            registry=registry,
        )
        self.upstream_calls_total = Counter(
            "plan_gateway_upstream_calls_total",
            "Total number of calls to the upstream chat-completion API.",
            ["endpoint", "status_code"],
            registry=registry,
        )
        self.upstream_call_duration_seconds = Histogram(
            "plan_gateway_upstream_call_duration_seconds",
            "Duration of calls to the upstream chat-completion API in seconds.",
            ["endpoint"],
            registry=registry,
        )
        self.api_errors_total = Counter(
            "plan_gateway_api_errors_total",
            "Total number of API errors.",
            ["endpoint", "error_type"],
            registry=registry,
        )
        self.deadline_expirations_total = Counter(
            "plan_gateway_deadline_expirations_total",
            "Total number of requests answered by the request deadline.",
            ["endpoint"],
            registry=registry,
        )
