"""Pytest fixtures for integration tests against emulated DynamoDB."""

import uuid
from typing import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from moto.server import ThreadedMotoServer

from admin_keys.config import Settings
from admin_keys.main import create_app
from infrastructure.dynamodb_tables import create_all


@pytest.fixture(scope="session")
def dynamodb_endpoint() -> Generator[str, None, None]:
    """Run moto's server on a free local port for the whole session."""
    server = ThreadedMotoServer(ip_address="127.0.0.1", port=0, verbose=False)
    server.start()
    host, port = server.get_host_and_port()
    yield f"http://{host}:{port}"
    server.stop()


@pytest.fixture
async def integration_settings(dynamodb_endpoint: str, legacy_key: str) -> Settings:
    """
    Settings pointing at fresh tables for each test.

    Tables get a random prefix so tests never see each other's data.
    """
    prefix = uuid.uuid4().hex[:8]
    settings = Settings(
        _env_file=None,
        environment="integration",
        store_backend="dynamodb",
        legacy_admin_key=legacy_key,
        aws_region="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        dynamodb_endpoint_url=dynamodb_endpoint,
        dynamodb_table_admin_keys=f"{prefix}-admin-keys",
        dynamodb_table_audit_logs=f"{prefix}-audit-logs",
        dynamodb_table_users=f"{prefix}-users",
    )
    await create_all(settings)
    return settings


@pytest.fixture
async def api_client(integration_settings: Settings) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for an application backed by DynamoDB."""
    app = create_app(integration_settings)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client
