"""Tests for GET /status and GET /."""

from typing import Any

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_status_endpoint_returns_200(client: AsyncClient) -> None:
    """Test that status endpoint returns 200 OK."""
    response = await client.get("/status")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"


@pytest.mark.asyncio
async def test_status_endpoint_has_required_fields(client: AsyncClient) -> None:
    """Test that status endpoint response has required fields."""
    response = await client.get("/status")

    data: dict[str, Any] = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "1.0.0"
    assert isinstance(data["uptime_seconds"], int)
    assert data["uptime_seconds"] >= 0


@pytest.mark.asyncio
async def test_status_endpoint_multiple_calls(client: AsyncClient) -> None:
    """Test that status endpoint can be called multiple times."""
    for _ in range(5):
        response = await client.get("/status")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_root_endpoint(client: AsyncClient) -> None:
    """Test that the root endpoint describes the service."""
    response = await client.get("/")

    data: dict[str, Any] = response.json()
    assert response.status_code == 200
    assert data["message"] == "Welcome to Admin Key Service"
    assert data["environment"] == "test"
    assert data["docs"] == "/docs"
    assert data["health"] == "/status"


@pytest.mark.asyncio
async def test_correlation_id_header(client: AsyncClient) -> None:
    """Test that a supplied request id is echoed back."""
    response = await client.get("/status", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"
