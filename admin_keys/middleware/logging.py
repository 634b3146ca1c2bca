"""Request logging middleware with correlation ID support."""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from admin_keys.auth.admin_key import QUERY_PARAM_NAMES
from admin_keys.logging.config import MASK, get_logger

logger = get_logger(__name__)


def _get_or_generate_correlation_id(request: Request) -> str:
    """
    Extract or generate a correlation ID for the request.

    Args:
        request: The incoming request

    Returns:
        The correlation ID (from header or newly generated)
    """
    return request.headers.get("X-Request-ID") or str(uuid.uuid4())


def masked_query_params(request: Request) -> dict[str, str]:
    """Query parameters with admin key values replaced by a mask."""
    return {
        name: MASK if name in QUERY_PARAM_NAMES else value
        for name, value in request.query_params.items()
    }


def _log_request_start(request: Request, correlation_id: str) -> None:
    logger.info(
        "Request started",
        extra={
            "correlation_id": correlation_id,
            "context": {
                "method": request.method,
                "path": request.url.path,
                "query_params": masked_query_params(request),
                "client_host": request.client.host if request.client else None,
            },
        },
    )


def _log_request_error(
    request: Request, correlation_id: str, exc: Exception, elapsed_ms: float
) -> None:
    logger.error(
        "Request failed with exception",
        exc_info=exc,
        extra={
            "correlation_id": correlation_id,
            "context": {
                "method": request.method,
                "path": request.url.path,
                "response_time_ms": elapsed_ms,
            },
        },
    )


def _log_request_complete(
    request: Request, response: Response, correlation_id: str, elapsed_ms: float
) -> None:
    """
    Log the completion of a request.

    Args:
        request: The incoming request
        response: The response being returned
        correlation_id: The correlation ID for this request
        elapsed_ms: Time elapsed during request processing
    """
    # Set by protected routes; the id only, never the secret
    admin_key_id = getattr(request.state, "admin_key_id", None)

    logger.info(
        "Request completed",
        extra={
            "correlation_id": correlation_id,
            "context": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "response_time_ms": round(elapsed_ms, 2),
                "admin_key_id": admin_key_id,
            },
        },
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests and responses.

    - Adds a correlation ID (X-Request-ID) to each request and response
    - Logs request start and completion with latency
    - Masks admin keys passed as query parameters
    - Includes the authorizing admin key id when a protected route set one
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = _get_or_generate_correlation_id(request)
        request.state.correlation_id = correlation_id

        start_time = time.time()
        _log_request_start(request, correlation_id)

        try:
            response = await call_next(request)
        except Exception as exc:
            elapsed_ms = (time.time() - start_time) * 1000
            _log_request_error(request, correlation_id, exc, elapsed_ms)
            raise

        elapsed_ms = (time.time() - start_time) * 1000
        _log_request_complete(request, response, correlation_id, elapsed_ms)

        response.headers["X-Request-ID"] = correlation_id

        return response
