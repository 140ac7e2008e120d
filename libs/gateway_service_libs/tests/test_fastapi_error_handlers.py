"""Tests for the FastAPI error rendering and backstop handlers."""

from __future__ import annotations

from common_core.error_enums import ErrorCode
from fastapi import FastAPI
from gateway_service_libs.error_handling import create_error_detail_with_context
from gateway_service_libs.error_handling.fastapi import (
    build_error_body,
    create_error_response,
    register_error_handlers,
)
from gateway_service_libs.error_handling.factories import raise_translation_error
from httpx import ASGITransport, AsyncClient


def _detail(status_code: int | None = None):
    return create_error_detail_with_context(
        error_code=ErrorCode.PROXY_ERROR,
        message="Upstream rejected the request",
        service="test_service",
        operation="call_upstream",
        request_id="req-body-1",
        details="status 401",
        context={"upstream_status": 401},
        status_code=status_code,
    )


def test_error_body_has_exactly_the_client_fields() -> None:
    body = build_error_body(_detail())

    assert body == {
        "error": {
            "message": "Upstream rejected the request",
            "type": "proxy_error",
            "code": "proxy_error",
            "details": "status 401",
            "requestId": "req-body-1",
        }
    }


def test_error_response_uses_explicit_status_and_request_header() -> None:
    response = create_error_response(_detail(status_code=401))

    assert response.status_code == 401
    assert response.headers["X-Request-ID"] == "req-body-1"


def test_error_response_falls_back_to_code_default() -> None:
    assert create_error_response(_detail()).status_code == 500


def _app() -> FastAPI:
    app = FastAPI(title="test_service")
    register_error_handlers(app)

    @app.get("/gateway-error")
    async def gateway_error() -> None:
        raise_translation_error("test_service", "route", "Cannot map reply", "req-route-1")

    @app.get("/crash")
    async def crash() -> None:
        raise ValueError("kaboom")

    @app.get("/typed/{count}")
    async def typed(count: int) -> dict[str, int]:
        return {"count": count}

    return app


async def test_registered_handlers_render_gateway_errors() -> None:
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        response = await client.get("/gateway-error")

    assert response.status_code == 500
    assert response.json()["error"]["type"] == "translation_error"
    assert response.json()["error"]["requestId"] == "req-route-1"


async def test_request_validation_errors_become_400() -> None:
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        response = await client.get("/typed/not-a-number")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation_error"


async def test_unexpected_exceptions_become_internal_error() -> None:
    transport = ASGITransport(app=_app(), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/crash")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["type"] == "internal_error"
    assert error["details"] == "kaboom"


async def test_unknown_path_gets_error_body() -> None:
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        response = await client.get("/nowhere")

    assert response.status_code == 404
    error = response.json()["error"]
    assert set(error) == {"message", "type", "code", "details", "requestId"}
    assert error["type"] == error["code"] == "proxy_error"
    assert error["requestId"]
    assert response.headers["X-Request-ID"] == error["requestId"]


async def test_wrong_method_keeps_status_and_allow_header() -> None:
    async with AsyncClient(transport=ASGITransport(app=_app()), base_url="http://test") as client:
        response = await client.post("/crash")

    assert response.status_code == 405
    assert response.json()["error"]["message"] == "Method Not Allowed"
    assert "GET" in response.headers["allow"]
