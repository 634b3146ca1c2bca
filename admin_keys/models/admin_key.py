"""Admin key model for DynamoDB."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class KeyStatus(str, Enum):
    """Stored status of an admin key. Only ``active`` keys validate."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class AdminKey(BaseModel):
    """
    Admin key record.

    Attributes:
        key_id: Unique identifier, primary key
        secret: Bearer credential, unique (AdminKeyIndex)
        limit: Maximum number of actions this key may authorize
        used_count: Actions authorized so far, only changed by atomic increment
        description: Free-text label
        status: active, inactive or suspended
        created_at: ISO 8601 creation timestamp
        updated_at: ISO 8601 timestamp of last change
        expires_at: Epoch seconds after which the key no longer validates
        created_by: Who issued the key
    """

    model_config = ConfigDict(
        use_enum_values=True,
        json_schema_extra={
            "example": {
                "key_id": "key-3f0c1b6de4a24c3f9b3e2f4f0f6a1c2d",
                "secret": "admin_key_9f86d081884c7d659a2feaa0c55ad015",
                "limit": 100,
                "used_count": 12,
                "description": "Limited access key for external integrations",
                "status": "active",
                "created_at": "2026-01-01T00:00:00+00:00",
                "updated_at": "2026-01-05T09:30:00+00:00",
                "expires_at": 1798761600,
                "created_by": "admin",
            }
        },
    )

    key_id: str = Field(..., description="Unique key identifier")
    secret: str = Field(..., description="Bearer credential")
    limit: int = Field(..., gt=0, description="Maximum authorized actions")
    used_count: int = Field(default=0, ge=0, description="Actions authorized so far")
    description: str = Field(default="", description="Human-readable description")
    status: KeyStatus = Field(default=KeyStatus.ACTIVE, description="Key status")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    updated_at: str = Field(..., description="ISO 8601 update timestamp")
    expires_at: int = Field(..., description="Expiry as epoch seconds")
    created_by: str = Field(default="admin", description="Issuer of the key")

    @property
    def remaining(self) -> int:
        """Actions still available under the quota."""
        return max(self.limit - self.used_count, 0)

    def is_expired(self, now: float) -> bool:
        """True once ``now`` is strictly past ``expires_at``."""
        return self.expires_at < int(now)
