"""Global exception handlers for consistent error responses."""

from typing import Any

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from admin_keys.exceptions import AdminKeyAPIError, ServiceUnavailableError
from admin_keys.logging.config import get_logger
from admin_keys.store.base import StoreError

logger = get_logger(__name__)


def create_error_response(
    error_code: str,
    message: str,
    status_code: int,
    details: Any = None,
    usage: str | None = None,
    correlation_id: str | None = None,
) -> JSONResponse:
    """
    Create standardized error response.

    Args:
        error_code: Machine-readable error code
        message: Human-readable error message
        status_code: HTTP status code
        details: Additional error details
        usage: Hint on how to present the admin key
        correlation_id: Request correlation ID for tracing

    Returns:
        JSONResponse with error information
    """
    content: dict[str, Any] = {
        "success": False,
        "error": message,
        "error_code": error_code,
        "details": details if details is not None else {},
    }

    if usage:
        content["usage"] = usage
    if correlation_id:
        content["correlation_id"] = correlation_id

    return JSONResponse(status_code=status_code, content=content)


def error_response(
    exc: AdminKeyAPIError, correlation_id: str | None = None
) -> JSONResponse:
    """Render an AdminKeyAPIError."""
    response = create_error_response(
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        details=exc.details,
        usage=exc.usage,
        correlation_id=correlation_id,
    )
    if isinstance(exc, ServiceUnavailableError):
        response.headers["Retry-After"] = str(exc.details.get("retry_after", 60))
    return response


async def admin_key_api_exception_handler(
    request: Request, exc: AdminKeyAPIError
) -> JSONResponse:
    """
    Handle custom AdminKeyAPIError.

    Args:
        request: FastAPI request
        exc: AdminKeyAPIError instance

    Returns:
        JSONResponse with error details
    """
    correlation_id = getattr(request.state, "correlation_id", None)
    if exc.status_code >= 500:
        logger.error(
            exc.message,
            extra={
                "correlation_id": correlation_id,
                "context": {
                    "error_code": exc.error_code,
                    "path": request.url.path,
                },
            },
        )
    return error_response(exc, correlation_id)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle Pydantic validation errors from FastAPI.

    Formats validation errors into user-friendly, actionable messages.

    Args:
        request: FastAPI request
        exc: RequestValidationError from Pydantic

    Returns:
        JSONResponse with validation error details
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    details: dict[str, Any] = {"validation_errors": []}
    error_messages = []

    for error in exc.errors():
        # Skip the 'body' / 'query' prefix for cleaner field names
        field_parts = [
            str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")
        ]
        field = ".".join(field_parts) if field_parts else "request"

        msg = error["msg"]
        error_type = error["type"]

        if error_type == "missing":
            msg = "Field is required"
        elif error_type == "value_error":
            msg = f"Invalid value: {msg}"
        elif error_type == "extra_forbidden":
            msg = "Field cannot be set"

        details["validation_errors"].append(
            {"field": field, "message": msg, "type": error_type}
        )
        error_messages.append(f"{field}: {msg}")

    summary = error_messages[0] if error_messages else "Invalid request data"
    if len(error_messages) > 1:
        summary += f" (and {len(error_messages) - 1} more errors)"

    return create_error_response(
        error_code="VALIDATION_ERROR",
        message=summary,
        status_code=status.HTTP_400_BAD_REQUEST,
        details=details,
        correlation_id=correlation_id,
    )


def _is_unavailable(exc: BaseException) -> bool:
    exc_str = str(exc).lower()
    exc_type = type(exc).__name__
    return any(
        keyword in exc_str for keyword in ("connection", "timeout", "unavailable")
    ) or any(keyword in exc_type for keyword in ("ConnectionError", "TimeoutError"))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full traceback and returns a generic error. Store connection
    problems and timeouts become 503.

    Args:
        request: FastAPI request
        exc: Any unhandled exception

    Returns:
        JSONResponse with generic error message
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {exc}",
        exc_info=exc,
        extra={
            "correlation_id": correlation_id,
            "context": {
                "exception_type": type(exc).__name__,
                "method": request.method,
                "path": request.url.path,
            },
        },
    )

    cause = exc.__cause__ if isinstance(exc, StoreError) and exc.__cause__ else exc
    if _is_unavailable(cause):
        return error_response(
            ServiceUnavailableError(
                message="Service temporarily unavailable. Please try again later.",
                service="dynamodb" if isinstance(exc, StoreError) else None,
            ),
            correlation_id,
        )

    return create_error_response(
        error_code="INTERNAL_ERROR",
        message="An internal error occurred. Please contact support with the correlation ID.",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details={},
        correlation_id=correlation_id,
    )
