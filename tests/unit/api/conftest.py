"""API test fixtures."""

from __future__ import annotations

from typing import AsyncIterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from crabo.api.app import create_app
from crabo.config import CraboSettings


@pytest.fixture
def crabo_client() -> AsyncMock:
    """Snapshot client stub without Redis."""
    client = AsyncMock()
    client.cache = None
    client.snap_many.return_value = []
    return client


@pytest.fixture
def app(mock_settings: CraboSettings, crabo_client: AsyncMock) -> FastAPI:
    """Application with stubbed snapshot client; lifespan is not run."""
    app = create_app(mock_settings)
    app.state.crabo_client = crabo_client
    return app


@pytest.fixture
async def api(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client talking to the application in process."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client
