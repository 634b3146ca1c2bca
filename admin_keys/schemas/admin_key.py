"""Pydantic schemas for admin key API requests and responses."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from admin_keys.models.admin_key import AdminKey, KeyStatus


class CreateAdminKeyRequest(BaseModel):
    """
    Request schema for issuing a new admin key.

    Attributes:
        limit: Maximum number of actions the key may authorize
        description: Free-text label
        expires_in_days: Lifetime in days (defaults to the configured value)
    """

    limit: int = Field(..., description="Maximum authorized actions (> 0)")
    description: str = Field(
        default="", max_length=500, description="Human-readable description"
    )
    expires_in_days: Optional[int] = Field(
        None, description="Lifetime in days (> 0)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "limit": 100,
                "description": "Limited access key for external integrations",
                "expires_in_days": 30,
            }
        }
    )


class UpdateAdminKeyRequest(BaseModel):
    """
    Partial update of an admin key.

    Usage counters are not accepted here; unknown fields are rejected.
    """

    limit: Optional[int] = Field(None, description="New quota limit (> 0)")
    description: Optional[str] = Field(None, max_length=500)
    status: Optional[KeyStatus] = Field(None, description="New key status")
    expires_in_days: Optional[int] = Field(
        None, description="New lifetime in days, counted from now"
    )

    model_config = ConfigDict(
        extra="forbid",
        json_schema_extra={"example": {"status": "suspended"}},
    )


class AdminKeyInfo(BaseModel):
    """Usage projection of the key that authorized an action."""

    key_id: str
    used_count: int
    limit: int
    remaining: int


class AdminKeyResponse(BaseModel):
    """
    Admin key as returned on the admin channel.

    Attributes:
        key_id: Unique key identifier
        secret: Bearer credential
        limit: Quota limit
        used_count: Actions authorized so far
        remaining: max(limit - used_count, 0)
        description: Free-text label
        status: Key status
        created_at: ISO 8601 creation timestamp
        updated_at: ISO 8601 update timestamp
        expires_at: Expiry as epoch seconds
        created_by: Issuer of the key
    """

    key_id: str
    secret: str
    limit: int
    used_count: int
    remaining: int
    description: str
    status: str
    created_at: str
    updated_at: str
    expires_at: int
    created_by: str

    @classmethod
    def from_model(cls, key: AdminKey) -> "AdminKeyResponse":
        """Build the response view of a stored key."""
        return cls(remaining=key.remaining, **key.model_dump())


class AdminKeyEnvelope(BaseModel):
    """Single admin key response."""

    success: bool = True
    admin_key: AdminKeyResponse
    message: Optional[str] = None


class AdminKeyListResponse(BaseModel):
    """All admin keys with usage."""

    success: bool = True
    admin_keys: List[AdminKeyResponse]
    total: int


class DeleteAdminKeyResponse(BaseModel):
    """Acknowledgement of a delete."""

    success: bool = True
    message: str


class KeyInfoResponse(BaseModel):
    """How to present an admin key to protected endpoints."""

    success: bool = True
    message: str
    usage: dict
    key_format: str
    endpoints: List[str]
