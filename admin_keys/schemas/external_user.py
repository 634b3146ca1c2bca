"""Pydantic schemas for the external user creation API."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from admin_keys.schemas.admin_key import AdminKeyInfo


class CreateExternalUserRequest(BaseModel):
    """
    Request schema for creating a user through the external API.

    Attributes:
        first_name: First name (required)
        last_name: Last name (required)
        email: Email address (required, stored lower-cased)
        password: Plain text password (required, stored as bcrypt hash)
        role: User role
        avatar: Optional avatar identifier
    """

    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=72)
    role: str = Field(default="user", max_length=50)
    avatar: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "first_name": "John",
                "last_name": "Doe",
                "email": "john@example.com",
                "password": "password123",
            }
        },
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Lower-case the email and require a single @ with both sides set."""
        local, sep, domain = v.partition("@")
        if not sep or not local or not domain or "@" in domain:
            raise ValueError("Invalid email address")
        return v.lower()

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, v: str) -> str:
        """bcrypt only accepts up to 72 bytes."""
        if len(v.encode("utf-8")) > 72:
            raise ValueError("Password must be at most 72 bytes")
        return v


class ExternalUserResponse(BaseModel):
    """Response schema for a created user."""

    success: bool = True
    user: Dict[str, Any]
    message: str
    admin_key_info: Optional[AdminKeyInfo] = None
