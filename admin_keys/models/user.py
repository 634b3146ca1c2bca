"""User model for accounts created through the external API."""

from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    """
    User record created by an admin-key-authorized request.

    ``password_hash`` is a bcrypt hash and is never returned to callers.
    """

    user_id: str = Field(..., description="Unique user identifier")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    email: str = Field(..., description="Lower-cased email, unique")
    password_hash: str = Field(..., description="Bcrypt password hash")
    role: str = Field(default="user", description="User role")
    status: str = Field(default="active", description="Account status")
    avatar: Optional[str] = Field(None, description="Avatar identifier")
    created_at: str = Field(..., description="ISO 8601 creation timestamp")
    updated_at: str = Field(..., description="ISO 8601 update timestamp")

    def public_dict(self) -> dict:
        """Serialize without the password hash."""
        return self.model_dump(exclude={"password_hash"})
