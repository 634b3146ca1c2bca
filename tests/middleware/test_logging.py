"""Tests for logging middleware and the JSON log formatter."""

import contextlib
import json
import logging
import uuid
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

import pytest
from fastapi import FastAPI, Request
from httpx import ASGITransport, AsyncClient

from admin_keys.logging.config import MASK, JSONFormatter, redact
from admin_keys.middleware import LoggingMiddleware


@pytest.fixture
def app_with_logging() -> FastAPI:
    """Create a test FastAPI app with logging middleware."""
    app = FastAPI()
    app.add_middleware(LoggingMiddleware)

    @app.get("/test")
    async def test_endpoint(request: Request) -> dict[str, str]:
        return {"correlation_id": request.state.correlation_id}

    @app.get("/protected")
    async def protected_endpoint(request: Request) -> dict[str, str]:
        request.state.admin_key_id = "key-abc"
        return {"ok": "yes"}

    @app.get("/error")
    async def error_endpoint() -> None:
        raise ValueError("Test error")

    return app


async def get(app: FastAPI, url: str, **kwargs):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.get(url, **kwargs)


def json_logger(
    name: str, level: int, formatter: JSONFormatter | None = None
) -> tuple[logging.Logger, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter or JSONFormatter())
    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.setLevel(level)
    logger.propagate = False
    return logger, stream


@pytest.mark.asyncio
async def test_logging_middleware_adds_correlation_id(app_with_logging: FastAPI) -> None:
    """Test that middleware adds a UUID correlation ID to state and response."""
    response = await get(app_with_logging, "/test")

    assert response.status_code == 200
    correlation_id = response.json()["correlation_id"]
    uuid.UUID(correlation_id)
    assert response.headers["x-request-id"] == correlation_id


@pytest.mark.asyncio
async def test_logging_middleware_uses_existing_correlation_id(
    app_with_logging: FastAPI,
) -> None:
    """Test that middleware uses X-Request-ID header if provided."""
    correlation_id = str(uuid.uuid4())

    response = await get(app_with_logging, "/test", headers={"X-Request-ID": correlation_id})

    assert response.json()["correlation_id"] == correlation_id


@pytest.mark.asyncio
async def test_logging_middleware_masks_admin_key_query_params(
    app_with_logging: FastAPI,
) -> None:
    """Test that admin keys in the query string never reach the log."""
    with patch("admin_keys.middleware.logging.logger") as mock_logger:
        await get(app_with_logging, "/test?first_name=Ann&x-admin-key=admin_key_s3cret&admin_key=k2")

    first_call = mock_logger.info.call_args_list[0]
    assert "Request started" in first_call[0]
    assert first_call[1]["extra"]["context"]["query_params"] == {
        "first_name": "Ann",
        "x-admin-key": "***",
        "admin_key": "***",
    }
    assert "admin_key_s3cret" not in str(mock_logger.mock_calls)


@pytest.mark.asyncio
async def test_logging_middleware_logs_response(app_with_logging: FastAPI) -> None:
    """Test that middleware logs response with status and timing."""
    with patch("admin_keys.middleware.logging.logger") as mock_logger:
        await get(app_with_logging, "/test")

    last_call = mock_logger.info.call_args_list[-1]
    assert "Request completed" in last_call[0]
    context = last_call[1]["extra"]["context"]
    assert context["status_code"] == 200
    assert context["response_time_ms"] >= 0
    assert context["admin_key_id"] is None


@pytest.mark.asyncio
async def test_logging_middleware_logs_admin_key_id(app_with_logging: FastAPI) -> None:
    """Test that the authorizing key id set by a route is logged."""
    with patch("admin_keys.middleware.logging.logger") as mock_logger:
        await get(app_with_logging, "/protected")

    context = mock_logger.info.call_args_list[-1][1]["extra"]["context"]
    assert context["admin_key_id"] == "key-abc"


@pytest.mark.asyncio
async def test_logging_middleware_logs_errors(app_with_logging: FastAPI) -> None:
    """Test that middleware logs exceptions."""
    with patch("admin_keys.middleware.logging.logger") as mock_logger:
        with contextlib.suppress(Exception):
            await get(app_with_logging, "/error")

    error_call = mock_logger.error.call_args_list[0]
    assert "Request failed with exception" in error_call[0]
    assert "exc_info" in error_call[1]


def test_json_formatter_output() -> None:
    """Test that JSONFormatter produces valid JSON with context merged in."""
    logger, stream = json_logger("test_json_logger", logging.INFO)

    logger.info(
        "Test message",
        extra={
            "correlation_id": "test-correlation-id",
            "context": {"admin_key_id": "key-1", "used_count": Decimal("3")},
        },
    )

    log_data = json.loads(stream.getvalue().strip())
    assert log_data["level"] == "INFO"
    assert log_data["message"] == "Test message"
    assert log_data["correlation_id"] == "test-correlation-id"
    assert log_data["admin_key_id"] == "key-1"
    assert log_data["used_count"] == 3
    assert "timestamp" in log_data
    assert "logger" in log_data


def test_json_formatter_includes_exception_info() -> None:
    """Test that JSONFormatter includes exception details."""
    logger, stream = json_logger("test_exception_logger", logging.ERROR)

    try:
        raise ValueError("Test exception")
    except ValueError:
        logger.error("Error occurred", exc_info=True)

    log_data = json.loads(stream.getvalue().strip())
    assert "ValueError" in log_data["exception"]
    assert "Test exception" in log_data["exception"]


def test_json_formatter_debug_includes_location() -> None:
    """Test that JSONFormatter includes file location at DEBUG level."""
    logger, stream = json_logger("test_debug_logger", logging.DEBUG)

    logger.debug("Debug message")

    log_data = json.loads(stream.getvalue().strip())
    assert "file" in log_data
    assert "line" in log_data
    assert "function" in log_data


def test_json_formatter_fractional_decimal() -> None:
    logger, stream = json_logger("test_decimal_logger", logging.INFO)

    logger.info("Ratio", extra={"context": {"ratio": Decimal("0.5")}})

    assert json.loads(stream.getvalue().strip())["ratio"] == 0.5


def test_json_formatter_redacts_credentials() -> None:
    """Secrets and passwords never reach the log line, however deeply nested."""
    logger, stream = json_logger("test_redacting_logger", logging.INFO)

    logger.info(
        "Key issued",
        extra={
            "context": {
                "admin_key_id": "key-1",
                "secret": "admin_key_0123456789abcdef0123456789abcdef",
                "request": {"headers": {"Authorization": "Bearer abc"}, "password": "pw"},
                "query_params": [{"admin_key": "admin_key_abc"}],
            }
        },
    )

    line = stream.getvalue()
    assert "admin_key_0123" not in line
    assert "Bearer abc" not in line
    log_data = json.loads(line.strip())
    assert log_data["admin_key_id"] == "key-1"
    assert log_data["secret"] == MASK
    assert log_data["request"] == {"headers": {"Authorization": MASK}, "password": MASK}
    assert log_data["query_params"] == [{"admin_key": MASK}]


def test_redact_leaves_other_values() -> None:
    context = {"used_count": 3, "tags": ("a", "b"), "email": "john@example.com"}

    assert redact(context) == {
        "used_count": 3,
        "tags": ["a", "b"],
        "email": "john@example.com",
    }


def test_json_formatter_stamps_environment() -> None:
    logger, stream = json_logger(
        "test_environment_logger", logging.INFO, JSONFormatter(environment="prod")
    )

    logger.info("Hello")

    assert json.loads(stream.getvalue().strip())["environment"] == "prod"
