"""Middleware components for request processing."""

from admin_keys.middleware.logging import LoggingMiddleware
from admin_keys.middleware.request_validation import RequestSizeValidationMiddleware

__all__ = [
    "LoggingMiddleware",
    "RequestSizeValidationMiddleware",
]
