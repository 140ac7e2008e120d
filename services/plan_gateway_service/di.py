"""Dependency Injection providers for Plan Gateway Service.

All dependencies are APP-scoped: the pipeline components are stateless and
per-request state lives in RequestContext and TimeoutState.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import httpx
from dishka import Provider, Scope, provide
from gateway_service_libs.logging_utils import create_service_logger
from prometheus_client import REGISTRY, CollectorRegistry

from services.plan_gateway_service.config import Settings, settings
from services.plan_gateway_service.endpoint_registry import TRANSLATION_RULES
from services.plan_gateway_service.implementations.endpoint_translator import EndpointTranslator
from services.plan_gateway_service.implementations.gateway_handler import GatewayHandler
from services.plan_gateway_service.implementations.mock_upstream_client import (
    MockUpstreamClient,
)
from services.plan_gateway_service.implementations.response_sanitizer import ResponseSanitizer
from services.plan_gateway_service.implementations.response_validator import ResponseValidator
from services.plan_gateway_service.implementations.timeout_coordinator import TimeoutCoordinator
from services.plan_gateway_service.implementations.upstream_client import UpstreamChatClient
from services.plan_gateway_service.metrics import GatewayMetrics
from services.plan_gateway_service.protocols import MetricsProtocol, UpstreamClientProtocol

logger = create_service_logger("plan_gateway.di")


class PlanGatewayProvider(Provider):
    """Infrastructure provider for Plan Gateway Service.

    Provides APP-scoped dependencies: config, HTTP client, upstream client, metrics.
    """

    scope = Scope.APP

    @provide
    def get_config(self) -> Settings:
        """Provide settings singleton."""
        return settings

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Settings) -> AsyncIterator[httpx.AsyncClient]:
        """Provide shared HTTP client with connection pooling."""
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.REQUEST_TIMEOUT_SECONDS,
                connect=config.HTTP_CLIENT_CONNECT_TIMEOUT_SECONDS,
            )
        ) as client:
            yield client

    @provide(scope=Scope.APP)
    def provide_upstream_client(
        self, config: Settings, http_client: httpx.AsyncClient
    ) -> UpstreamClientProtocol:
        if config.USE_MOCK_UPSTREAM:
            logger.warning("USE_MOCK_UPSTREAM is enabled, upstream calls are answered in-process")
            return MockUpstreamClient(config)
        return UpstreamChatClient(http_client, config)

    @provide(scope=Scope.APP)
    def provide_registry(self) -> CollectorRegistry:
        return REGISTRY

    @provide(scope=Scope.APP)
    def provide_metrics(self, registry: CollectorRegistry) -> MetricsProtocol:
        return GatewayMetrics(registry=registry)


class PipelineProvider(Provider):
    """Pipeline components shared by every request.

    Kept apart from the infrastructure provider so tests can pair the real
    pipeline with fake infrastructure.
    """

    scope = Scope.APP

    @provide(scope=Scope.APP)
    def provide_sanitizer(self, config: Settings) -> ResponseSanitizer:
        return ResponseSanitizer(config.SERVICE_NAME, config.MAX_LOG_EXCERPT_CHARS)

    @provide(scope=Scope.APP)
    def provide_validator(self, config: Settings) -> ResponseValidator:
        return ResponseValidator(config.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_translator(
        self, config: Settings, sanitizer: ResponseSanitizer
    ) -> EndpointTranslator:
        return EndpointTranslator(config, sanitizer, TRANSLATION_RULES)

    @provide(scope=Scope.APP)
    def provide_coordinator(self, config: Settings) -> TimeoutCoordinator:
        return TimeoutCoordinator(config.REQUEST_TIMEOUT_SECONDS, config.SERVICE_NAME)

    @provide(scope=Scope.APP)
    def provide_handler(
        self,
        config: Settings,
        upstream: UpstreamClientProtocol,
        translator: EndpointTranslator,
        sanitizer: ResponseSanitizer,
        validator: ResponseValidator,
        coordinator: TimeoutCoordinator,
        metrics: MetricsProtocol,
    ) -> GatewayHandler:
        """Provide the request handler shared by every proxied route."""
        return GatewayHandler(
            settings=config,
            upstream=upstream,
            translator=translator,
            sanitizer=sanitizer,
            validator=validator,
            coordinator=coordinator,
            metrics=metrics,
        )
