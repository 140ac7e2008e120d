"""Proxied routes for Plan Gateway Service.

One POST route per EndpointSpec, all served by the same GatewayHandler. The
routes are generated from the endpoint table, so registering a new
specialized endpoint there is enough to expose it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Request
from fastapi.responses import Response

from services.plan_gateway_service.endpoint_registry import ENDPOINT_SPECS
from services.plan_gateway_service.implementations.gateway_handler import GatewayHandler


def _make_endpoint(endpoint_key: str) -> Callable[..., Awaitable[Response]]:
    @inject
    async def proxy_endpoint(request: Request, handler: FromDishka[GatewayHandler]) -> Response:
        return await handler.handle(request, endpoint_key)

    return proxy_endpoint


def build_proxy_router(path_prefix: str) -> APIRouter:
    """Router exposing every endpoint under ``path_prefix`` (``/openai``)."""
    router = APIRouter()
    for spec in ENDPOINT_SPECS.values():
        router.add_api_route(
            f"{path_prefix}{spec.path}",
            _make_endpoint(spec.key),
            methods=["POST"],
            name=spec.key,
            response_model=None,
            tags=["Specialized" if spec.specialized else "Chat"],
        )
    return router
