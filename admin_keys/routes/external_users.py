"""External user creation endpoints, protected by admin keys."""

from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status

from admin_keys.auth.dependencies import get_credential, get_guard, get_user_service
from admin_keys.models.audit_record import LEGACY_KEY_SENTINEL
from admin_keys.schemas.external_user import ExternalUserResponse
from admin_keys.services.guard import ProtectedActionGuard
from admin_keys.services.user_service import (
    ExternalUserService,
    audit_subject,
    payload_from_query,
)

router = APIRouter(prefix="/api/external", tags=["External Users"])


async def _create_user(
    request: Request,
    payload: Any,
    credential: str | None,
    guard: ProtectedActionGuard,
    users: ExternalUserService,
) -> ExternalUserResponse:
    outcome = await guard.execute(
        credential,
        request.method,
        audit_subject(payload),
        lambda: users.create_user(payload),
    )
    request.state.admin_key_id = outcome.admin_key_id or LEGACY_KEY_SENTINEL

    return ExternalUserResponse(
        user=outcome.result.public_dict(),
        message="User created successfully",
        admin_key_info=outcome.admin_key_info,
    )


@router.post(
    "/users",
    response_model=ExternalUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description=(
        "Create a user. Requires an admin key in the `x-admin-key` header or "
        "`Authorization: Bearer <key>`. Each success consumes one unit of the "
        "key's quota."
    ),
)
async def create_user(
    request: Request,
    payload: Any = Body(None),
    credential: str | None = Depends(get_credential),
    guard: ProtectedActionGuard = Depends(get_guard),
    users: ExternalUserService = Depends(get_user_service),
) -> ExternalUserResponse:
    """
    Create a user from a JSON body.

    Args:
        request: FastAPI request
        payload: first_name, last_name, email, password and optional role
        credential: Presented admin key
        guard: Protected action pipeline
        users: User creation service

    Returns:
        ExternalUserResponse with the user and the key's remaining quota
    """
    return await _create_user(request, payload, credential, guard, users)


@router.get(
    "/users",
    response_model=ExternalUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User (query string)",
    description=(
        "Create a user from query parameters. The admin key may be passed as "
        "`?x-admin-key=<key>` or `?admin_key=<key>`."
    ),
)
async def create_user_from_query(
    request: Request,
    credential: str | None = Depends(get_credential),
    guard: ProtectedActionGuard = Depends(get_guard),
    users: ExternalUserService = Depends(get_user_service),
) -> ExternalUserResponse:
    """Create a user from query parameters."""
    payload = payload_from_query(request.query_params)
    return await _create_user(request, payload, credential, guard, users)
