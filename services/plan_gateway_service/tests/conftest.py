"""
Shared test configuration for Plan Gateway Service.

Route tests get an httpx AsyncClient bound to the FastAPI app through
ASGITransport. The app runs the production pipeline on top of
InfrastructureTestProvider, so upstream traffic goes either to respx or to
a fake upstream passed to the client factory.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AsyncExitStack

import pytest
from dishka import make_async_container
from dishka.integrations.fastapi import FastapiProvider
from httpx import ASGITransport, AsyncClient

from services.plan_gateway_service.app import create_app
from services.plan_gateway_service.config import Settings
from services.plan_gateway_service.di import PipelineProvider
from services.plan_gateway_service.protocols import UpstreamClientProtocol
from services.plan_gateway_service.tests.test_provider import (
    ClientFactory,
    InfrastructureTestProvider,
    make_test_settings,
)


@pytest.fixture
def test_settings() -> Settings:
    return make_test_settings()


@pytest.fixture
async def client_factory() -> AsyncIterator[ClientFactory]:
    """Build clients for apps with custom settings or a fake upstream."""
    async with AsyncExitStack() as stack:

        async def _create(
            settings: Settings | None = None,
            upstream: UpstreamClientProtocol | None = None,
        ) -> AsyncClient:
            config = settings or make_test_settings()
            container = make_async_container(
                InfrastructureTestProvider(config, upstream),
                PipelineProvider(),
                FastapiProvider(),
            )
            stack.push_async_callback(container.close)
            app = create_app(config, container)
            return await stack.enter_async_context(
                AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
            )

        yield _create


@pytest.fixture
async def client(client_factory: ClientFactory) -> AsyncClient:
    """Client for an app with default test settings and the real upstream client."""
    return await client_factory()
