"""Custom exception classes for the Admin Key Service."""

from typing import Any


class AdminKeyAPIError(Exception):
    """Base exception for the Admin Key Service."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Any = None,
        usage: str | None = None,
    ) -> None:
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            error_code: Machine-readable error code
            details: Additional error details
            usage: Hint telling the caller how to supply the credential
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details if details is not None else {}
        self.usage = usage


class MissingCredentialError(AdminKeyAPIError):
    """Raised when no admin key was presented (401)."""

    def __init__(
        self,
        message: str = "Missing admin key",
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="MISSING_CREDENTIAL",
            usage=usage,
        )


class InvalidCredentialError(AdminKeyAPIError):
    """Raised when the presented admin key does not exist (401)."""

    def __init__(
        self,
        message: str = "Invalid admin key",
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="INVALID_CREDENTIAL",
            usage=usage,
        )


class InactiveKeyError(AdminKeyAPIError):
    """Raised when the admin key is not active (401)."""

    def __init__(
        self,
        message: str = "Admin key is inactive",
        details: Any = None,
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="KEY_INACTIVE",
            details=details,
            usage=usage,
        )


class ExpiredKeyError(AdminKeyAPIError):
    """Raised when the admin key is past its deadline (401)."""

    def __init__(
        self,
        message: str = "Admin key has expired",
        details: Any = None,
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code="KEY_EXPIRED",
            details=details,
            usage=usage,
        )


class QuotaExhaustedError(AdminKeyAPIError):
    """Raised when the admin key has no remaining quota (429)."""

    def __init__(
        self,
        message: str = "limit reached",
        used_count: int = 0,
        limit: int = 0,
        usage: str | None = None,
    ) -> None:
        """
        Initialize QuotaExhaustedError.

        Args:
            message: Error message
            used_count: Current usage of the key
            limit: Quota limit of the key
            usage: Credential usage hint
        """
        super().__init__(
            message=message,
            status_code=429,
            error_code="LIMIT_REACHED",
            details={"used_count": used_count, "limit": limit, "remaining": 0},
            usage=usage,
        )


class CredentialLookupError(AdminKeyAPIError):
    """Raised when the key store could not be consulted (500)."""

    def __init__(
        self,
        message: str = "Error validating admin key",
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="INTERNAL_ERROR",
            usage=usage,
        )


class ValidationError(AdminKeyAPIError):
    """Raised when request data fails business validation (400)."""

    def __init__(
        self,
        message: str = "Invalid request data",
        details: dict[str, Any] | None = None,
        usage: str | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details,
            usage=usage,
        )


class NotFoundError(AdminKeyAPIError):
    """Raised when a resource is not found (404)."""

    def __init__(
        self,
        message: str = "Resource not found",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class ConflictError(AdminKeyAPIError):
    """Raised when the action collides with existing data (409)."""

    def __init__(
        self,
        message: str = "Resource already exists",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


class ServiceUnavailableError(AdminKeyAPIError):
    """Raised when a dependent service is unavailable (503)."""

    def __init__(
        self,
        message: str = "Service temporarily unavailable",
        service: str | None = None,
        retry_after: int = 60,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize ServiceUnavailableError.

        Args:
            message: Error message
            service: Name of the unavailable service
            retry_after: Seconds until retry is recommended
            details: Additional error details
        """
        error_details = details or {}
        error_details["retry_after"] = retry_after
        if service:
            error_details["service"] = service
        super().__init__(
            message=message,
            status_code=503,
            error_code="SERVICE_UNAVAILABLE",
            details=error_details,
        )


class RequestTooLargeError(AdminKeyAPIError):
    """Raised when request payload exceeds size limit (413)."""

    def __init__(
        self,
        message: str = "Request payload too large",
        max_size: str = "512KB",
        details: dict[str, Any] | None = None,
    ) -> None:
        error_details = details or {}
        error_details["max_size"] = max_size
        super().__init__(
            message=message,
            status_code=413,
            error_code="PAYLOAD_TOO_LARGE",
            details=error_details,
        )
