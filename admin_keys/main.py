"""FastAPI application entry point."""

import time
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from admin_keys.auth.validator import KeyValidator
from admin_keys.config import Settings
from admin_keys.exceptions import AdminKeyAPIError
from admin_keys.handlers.exception_handler import (
    admin_key_api_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)
from admin_keys.logging.config import configure_logging
from admin_keys.middleware.logging import LoggingMiddleware
from admin_keys.middleware.request_validation import RequestSizeValidationMiddleware
from admin_keys.repositories import (
    AdminKeyRepository,
    AuditLogRepository,
    UserRepository,
)
from admin_keys.routes import audit_logs, external_users, keys, status
from admin_keys.services.admin_key_service import KeyLifecycleManager
from admin_keys.services.audit_service import AuditLogger
from admin_keys.services.guard import ProtectedActionGuard
from admin_keys.services.quota_service import QuotaEnforcer
from admin_keys.services.user_service import ExternalUserService
from admin_keys.store import DurableStore, create_store

DESCRIPTION = """
## Admin Key Service

Issues admin keys with usage quotas and expiry, authorizes external user
creation with them, and keeps an audit trail of every attempt.

### Authentication

Protected endpoints accept an admin key as:

```
x-admin-key: YOUR_ADMIN_KEY
Authorization: Bearer YOUR_ADMIN_KEY
GET ...?x-admin-key=YOUR_ADMIN_KEY
```

### Quotas

Each key authorizes at most `limit` successful actions. Exhausted keys get
`429 limit reached`; inactive, suspended, expired or unknown keys get `401`.

### Management

`/api/admin/*` endpoints manage keys and read the audit trail. They are meant
for the admin network only and do not take an admin key.
"""


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DurableStore] = None,
) -> FastAPI:
    """
    Build the application and its components.

    Args:
        settings: Configuration (loaded from the environment if None)
        store: Durable store (built from settings if None)

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()
    configure_logging(settings.log_level, settings.environment)
    store = store or create_store(settings)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description=DESCRIPTION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    key_repository = AdminKeyRepository(store, settings)
    audit = AuditLogger(AuditLogRepository(store, settings), settings)

    app.state.settings = settings
    app.state.store = store
    app.state.started_at = time.time()
    app.state.audit = audit
    app.state.lifecycle = KeyLifecycleManager(key_repository, settings)
    app.state.users = ExternalUserService(UserRepository(store, settings))
    app.state.guard = ProtectedActionGuard(
        KeyValidator(key_repository, settings),
        QuotaEnforcer(key_repository, settings),
        audit,
    )

    # First added = innermost; size check runs inside the request logger
    app.add_middleware(
        RequestSizeValidationMiddleware,
        max_request_size_bytes=settings.max_request_size_bytes,
    )
    app.add_middleware(LoggingMiddleware)

    app.add_exception_handler(AdminKeyAPIError, admin_key_api_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(external_users.router)
    app.include_router(keys.router)
    app.include_router(audit_logs.router)
    app.include_router(status.router)

    @app.get("/", tags=["Root"])
    async def root() -> dict[str, str]:
        """
        Root endpoint with service information.

        Returns:
            Dict with welcome message and docs link
        """
        return {
            "message": f"Welcome to {settings.api_title}",
            "version": settings.api_version,
            "environment": settings.environment,
            "docs": "/docs",
            "health": "/status",
        }

    return app
