"""Plan Gateway Service - chat-completion proxy with plan generation endpoints.

Forwards chat completions to the upstream API and serves workout and meal
plans by translating them into a single chat-completion call, under one
deadline per request.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dishka import AsyncContainer, make_async_container
from dishka.integrations.fastapi import FastapiProvider, setup_dishka
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from gateway_service_libs.error_handling.fastapi import (
    register_error_handlers as register_fastapi_error_handlers,
)
from gateway_service_libs.logging_utils import configure_service_logging, create_service_logger

from services.plan_gateway_service.api.health_routes import router as health_router
from services.plan_gateway_service.api.proxy_routes import build_proxy_router
from services.plan_gateway_service.config import Settings, settings
from services.plan_gateway_service.di import PipelineProvider, PlanGatewayProvider
from services.plan_gateway_service.middleware import RequestIDMiddleware

configure_service_logging(
    settings.SERVICE_NAME,
    environment=settings.ENVIRONMENT.value,
    log_level=settings.LOG_LEVEL,
)
logger = create_service_logger("plan_gateway.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    config: Settings = app.state.settings
    logger.info(
        "Proxy server started",
        port=config.PORT,
        environment=config.ENVIRONMENT.value,
        base_url=config.UPSTREAM_BASE_URL,
        timeout=f"{config.REQUEST_TIMEOUT_SECONDS:g} seconds",
        features={
            "request_tracking": True,
            "timeout_handling": True,
            "json_cleaning": True,
            "response_validation": True,
            "mock_upstream": config.USE_MOCK_UPSTREAM,
        },
    )
    yield
    await app.state.di_container.close()
    logger.info("Plan Gateway Service shutdown complete")


def create_app(
    app_settings: Settings | None = None, container: AsyncContainer | None = None
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build routes from; the module settings by default
        container: Prebuilt DI container, used by tests to swap providers
    """
    config = app_settings or settings
    app = FastAPI(
        title=config.SERVICE_NAME,
        version="1.0.0",
        description="Plan Gateway - chat-completion proxy with workout and meal plan endpoints",
        docs_url="/docs" if config.is_development() else None,
        redoc_url=None,
        openapi_url="/openapi.json" if config.is_development() else None,
        lifespan=lifespan,
    )
    app.state.settings = config

    # Register error handlers
    register_fastapi_error_handlers(app)

    # Add Request ID Middleware
    app.add_middleware(RequestIDMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=config.CORS_ALLOW_CREDENTIALS,
        allow_methods=config.CORS_ALLOW_METHODS,
        allow_headers=config.CORS_ALLOW_HEADERS,
        expose_headers=["X-Request-ID"],
    )

    app.include_router(health_router)
    app.include_router(build_proxy_router(config.PROXY_PATH_PREFIX))

    # Setup Dishka DI container
    if container is None:
        container = make_async_container(
            PlanGatewayProvider(),
            PipelineProvider(),
            FastapiProvider(),
        )
    setup_dishka(container, app)
    app.state.di_container = container

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "services.plan_gateway_service.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.is_development(),
        log_level=settings.LOG_LEVEL.lower(),
    )
