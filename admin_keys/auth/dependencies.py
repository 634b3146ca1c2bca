"""FastAPI dependencies for admin key authentication and service lookup."""

from fastapi import Request

from admin_keys.auth.admin_key import extract_credential
from admin_keys.config import Settings
from admin_keys.services.admin_key_service import KeyLifecycleManager
from admin_keys.services.audit_service import AuditLogger
from admin_keys.services.guard import ProtectedActionGuard
from admin_keys.services.user_service import ExternalUserService


async def get_credential(request: Request) -> str | None:
    """
    Extract the presented admin key from the request.

    Header ``x-admin-key`` first, then ``Authorization: Bearer <key>``, then
    the ``x-admin-key`` / ``admin_key`` query parameters on GET requests.

    Args:
        request: FastAPI request

    Returns:
        The credential, or None when nothing was presented
    """
    return extract_credential(request.headers, request.query_params, request.method)


def get_settings(request: Request) -> Settings:
    """Settings the application was built with."""
    return request.app.state.settings


def get_guard(request: Request) -> ProtectedActionGuard:
    """Protected action pipeline."""
    return request.app.state.guard


def get_lifecycle_manager(request: Request) -> KeyLifecycleManager:
    """Admin key lifecycle service."""
    return request.app.state.lifecycle


def get_audit_logger(request: Request) -> AuditLogger:
    """Audit trail writer and query service."""
    return request.app.state.audit


def get_user_service(request: Request) -> ExternalUserService:
    """External user creation service."""
    return request.app.state.users
