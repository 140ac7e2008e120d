"""Health and metrics routes for Plan Gateway Service."""

from __future__ import annotations

from dishka import FromDishka
from dishka.integrations.fastapi import inject
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse
from gateway_service_libs.logging_utils import create_service_logger
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from services.plan_gateway_service.config import Settings

router = APIRouter(tags=["Health"])
logger = create_service_logger("plan_gateway.routers.health")


@router.get("/healthz")
@inject
async def health_check(config: FromDishka[Settings]) -> dict[str, str | dict]:
    """Health check endpoint; degraded when no upstream credentials are configured."""
    api_key_configured = bool(config.reveal(config.UPSTREAM_API_KEY))
    checks = {
        "service_responsive": True,
        "upstream_credentials": api_key_configured or config.USE_MOCK_UPSTREAM,
    }
    overall_status = "healthy" if all(checks.values()) else "degraded"

    return {
        "service": config.SERVICE_NAME,
        "status": overall_status,
        "message": f"Plan Gateway Service is {overall_status}",
        "version": "1.0.0",
        "checks": checks,
        "dependencies": {
            "upstream": {
                "status": "mock" if config.USE_MOCK_UPSTREAM else "configured",
                "base_url": config.UPSTREAM_BASE_URL,
                "timeout_seconds": str(config.REQUEST_TIMEOUT_SECONDS),
            }
        },
        "environment": config.ENVIRONMENT.value,
    }


@router.get("/metrics", response_class=PlainTextResponse)
@inject
async def metrics(registry: FromDishka[CollectorRegistry]):
    """Prometheus metrics endpoint."""
    try:
        metrics_data = generate_latest(registry)
        return PlainTextResponse(content=metrics_data, media_type=CONTENT_TYPE_LATEST)
    except Exception as e:
        logger.error(f"Error generating metrics: {e}", exc_info=True)
        return PlainTextResponse(content="Error generating metrics", status_code=500)
