"""Request validation middleware."""

import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from admin_keys.exceptions import RequestTooLargeError
from admin_keys.handlers.exception_handler import error_response


class RequestSizeValidationMiddleware(BaseHTTPMiddleware):
    """
    Rejects requests whose declared Content-Length exceeds the limit.

    Oversized requests get 413 Payload Too Large before the body is read.
    """

    def __init__(self, app: ASGIApp, max_request_size_bytes: int) -> None:
        """
        Initialize the middleware.

        Args:
            app: Wrapped ASGI application
            max_request_size_bytes: Largest accepted request body
        """
        super().__init__(app)
        self.max_request_size_bytes = max_request_size_bytes

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = (
            getattr(request.state, "correlation_id", None)
            or request.headers.get("X-Request-ID")
            or str(uuid.uuid4())
        )
        request.state.correlation_id = correlation_id

        content_length = request.headers.get("content-length")
        if content_length:
            try:
                size = int(content_length)
            except ValueError:
                # Malformed header; the server rejects the body itself
                size = 0

            if size > self.max_request_size_bytes:
                size_kb = size / 1024
                max_kb = self.max_request_size_bytes / 1024
                exc = RequestTooLargeError(
                    message=f"Request size {size_kb:.1f}KB exceeds maximum {max_kb:.0f}KB",
                    max_size=f"{max_kb:.0f}KB",
                    details={"request_size": f"{size_kb:.1f}KB"},
                )
                response = error_response(exc, correlation_id)
                response.headers["X-Request-ID"] = correlation_id
                return response

        return await call_next(request)
