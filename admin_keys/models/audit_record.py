"""Audit record model for DynamoDB."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

LEGACY_KEY_SENTINEL = "legacy_key"
UNRESOLVED_KEY_SENTINEL = "unresolved_key"
MISSING_SECRET_SENTINEL = "missing"


class AuditRecord(BaseModel):
    """
    Immutable record of one authorization attempt.

    Attributes:
        log_id: Unique, creation-time ordered identifier
        key_id: Key that authorized (or attempted) the action
        secret: Credential as presented, denormalized for lookup
        action_subject: Identifying fields of the action target
        success: Whether the action succeeded
        error_message: Failure reason, present iff not success
        created_at: ISO 8601 creation timestamp
        retention_deadline: Epoch seconds TTL for store expiry
        usage_before: Key usage immediately before the action
        usage_after: Key usage immediately after the action
        key_description: Description of the key at call time
        environment: Deployment environment name
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "log_id": "log_1767605400123_000000_5f2a9c1e",
                "key_id": "key-3f0c1b6de4a24c3f9b3e2f4f0f6a1c2d",
                "secret": "admin_key_9f86d081884c7d659a2feaa0c55ad015",
                "action_subject": {"email": "john@example.com"},
                "success": True,
                "error_message": None,
                "created_at": "2026-01-05T09:30:00.123456+00:00",
                "retention_deadline": 1799314200,
                "usage_before": 11,
                "usage_after": 12,
                "key_description": "Limited access key",
                "environment": "dev",
            }
        }
    )

    log_id: str = Field(..., description="Unique log identifier")
    key_id: str = Field(..., description="Admin key identifier")
    secret: str = Field(..., description="Credential as presented")
    action_subject: dict[str, Any] = Field(
        default_factory=dict, description="Action target fields"
    )
    success: bool = Field(..., description="Action outcome")
    error_message: Optional[str] = Field(None, description="Failure reason")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    retention_deadline: int = Field(..., description="TTL as epoch seconds")
    usage_before: Optional[int] = Field(None, description="Usage before action")
    usage_after: Optional[int] = Field(None, description="Usage after action")
    key_description: Optional[str] = Field(None, description="Key description")
    environment: Optional[str] = Field(None, description="Environment name")
