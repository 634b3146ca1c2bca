"""Admin key management endpoints.

These run on the admin-trusted channel: they are not admin-key protected
and do not consume quota. Deploy them behind the admin network boundary.
"""

from fastapi import APIRouter, Depends, status

from admin_keys.auth.admin_key import GET_USAGE_HINT, HEADER_USAGE_HINT
from admin_keys.auth.dependencies import get_lifecycle_manager, get_settings
from admin_keys.config import Settings
from admin_keys.schemas.admin_key import (
    AdminKeyEnvelope,
    AdminKeyListResponse,
    AdminKeyResponse,
    CreateAdminKeyRequest,
    DeleteAdminKeyResponse,
    KeyInfoResponse,
    UpdateAdminKeyRequest,
)
from admin_keys.services.admin_key_service import KeyLifecycleManager

router = APIRouter(prefix="/api/admin", tags=["Admin Keys"])


@router.get(
    "/keys",
    response_model=AdminKeyListResponse,
    summary="List Admin Keys",
)
async def list_admin_keys(
    lifecycle: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> AdminKeyListResponse:
    """
    List every admin key with its usage.

    Returns:
        AdminKeyListResponse with keys and total
    """
    keys = await lifecycle.list()
    keys.sort(key=lambda k: k.created_at, reverse=True)
    return AdminKeyListResponse(
        admin_keys=[AdminKeyResponse.from_model(k) for k in keys],
        total=len(keys),
    )


@router.post(
    "/keys",
    response_model=AdminKeyEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Admin Key",
    description="Issue a new admin key. The secret is returned in the response.",
)
async def create_admin_key(
    body: CreateAdminKeyRequest,
    lifecycle: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> AdminKeyEnvelope:
    """
    Issue a new admin key.

    Args:
        body: limit, description and optional expires_in_days
        lifecycle: Key lifecycle service

    Returns:
        AdminKeyEnvelope with the new key and its secret
    """
    admin_key = await lifecycle.create(
        limit=body.limit,
        description=body.description,
        expires_in_days=body.expires_in_days,
    )
    return AdminKeyEnvelope(
        admin_key=AdminKeyResponse.from_model(admin_key),
        message="Admin key created successfully",
    )


@router.get(
    "/keys/{key_id}",
    response_model=AdminKeyEnvelope,
    summary="Get Admin Key",
)
async def get_admin_key(
    key_id: str,
    lifecycle: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> AdminKeyEnvelope:
    """Fetch one admin key; 404 if it does not exist."""
    admin_key = await lifecycle.get(key_id)
    return AdminKeyEnvelope(admin_key=AdminKeyResponse.from_model(admin_key))


@router.put(
    "/keys/{key_id}",
    response_model=AdminKeyEnvelope,
    summary="Update Admin Key",
    description=(
        "Change limit, description, status or lifetime. Usage counters cannot "
        "be changed here, and a limit below the current usage is refused "
        "with 409."
    ),
)
async def update_admin_key(
    key_id: str,
    body: UpdateAdminKeyRequest,
    lifecycle: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> AdminKeyEnvelope:
    """
    Patch an admin key.

    Args:
        key_id: Key to update
        body: Fields to change
        lifecycle: Key lifecycle service

    Returns:
        AdminKeyEnvelope with the updated key
    """
    admin_key = await lifecycle.update(
        key_id,
        limit=body.limit,
        description=body.description,
        status=body.status,
        expires_in_days=body.expires_in_days,
    )
    return AdminKeyEnvelope(
        admin_key=AdminKeyResponse.from_model(admin_key),
        message="Admin key updated successfully",
    )


@router.delete(
    "/keys/{key_id}",
    response_model=DeleteAdminKeyResponse,
    summary="Delete Admin Key",
)
async def delete_admin_key(
    key_id: str,
    lifecycle: KeyLifecycleManager = Depends(get_lifecycle_manager),
) -> DeleteAdminKeyResponse:
    """Hard delete an admin key. Deleting a missing key succeeds."""
    await lifecycle.delete(key_id)
    return DeleteAdminKeyResponse(message="Admin key deleted successfully")


@router.get(
    "/key-info",
    response_model=KeyInfoResponse,
    summary="Admin Key Usage",
)
async def key_info(settings: Settings = Depends(get_settings)) -> KeyInfoResponse:
    """Explain how to present an admin key to protected endpoints."""
    return KeyInfoResponse(
        message="Admin keys authorize calls to the external API",
        usage={
            "header": HEADER_USAGE_HINT,
            "query": GET_USAGE_HINT + " (GET requests only)",
        },
        key_format=f"{settings.admin_key_prefix}<32 hex characters>",
        endpoints=["POST /api/external/users", "GET /api/external/users"],
    )
