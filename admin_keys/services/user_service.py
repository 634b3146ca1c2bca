"""External user creation: the action protected by admin keys."""

import time
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from admin_keys.auth.admin_key import QUERY_PARAM_NAMES, hash_password
from admin_keys.exceptions import ConflictError, ValidationError
from admin_keys.logging.config import get_logger
from admin_keys.models.user import User
from admin_keys.repositories.user_repository import UserRepository
from admin_keys.schemas.external_user import CreateExternalUserRequest
from admin_keys.store.base import ConditionFailedError
from admin_keys.utils.timestamps import iso_timestamp

logger = get_logger(__name__)

REQUIRED_FIELDS = ("first_name", "last_name", "email", "password")
SUBJECT_FIELDS = ("email", "first_name", "last_name", "role")


def audit_subject(payload: Mapping[str, Any]) -> dict[str, str]:
    """
    Identifying fields of the user being created, for the audit trail.

    Values are stringified; the password never appears.
    """
    subject = {"role": "user", "status": "active"}
    if not isinstance(payload, Mapping):
        return subject
    for name in SUBJECT_FIELDS:
        value = payload.get(name)
        if value is not None and value != "":
            subject[name] = str(value)
    if "email" in subject:
        subject["email"] = subject["email"].strip().lower()
    return subject


def payload_from_query(query_params: Mapping[str, str]) -> dict[str, str]:
    """User fields from a GET query string, minus the credential parameters."""
    return {k: v for k, v in query_params.items() if k not in QUERY_PARAM_NAMES}


def parse_request(payload: Mapping[str, Any] | None) -> CreateExternalUserRequest:
    """
    Validate raw user fields.

    Raises:
        ValidationError: If required fields are missing or malformed
    """
    payload = payload or {}
    if not isinstance(payload, Mapping):
        raise ValidationError(message="Request body must be a JSON object")
    missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
    if missing:
        raise ValidationError(
            message="Missing required fields: " + ", ".join(REQUIRED_FIELDS),
            details={"missing_fields": missing},
        )
    try:
        return CreateExternalUserRequest.model_validate(dict(payload))
    except PydanticValidationError as exc:
        errors = [
            {
                "field": ".".join(str(loc) for loc in error["loc"]) or "request",
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        raise ValidationError(
            message=f"{errors[0]['field']}: {errors[0]['message']}",
            details={"validation_errors": errors},
        )


class ExternalUserService:
    """Creates users on behalf of admin-key-authorized callers."""

    def __init__(
        self,
        repository: UserRepository,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize ExternalUserService.

        Args:
            repository: User repository
            clock: Source of the current epoch time
        """
        self.repository = repository
        self._clock = clock

    async def create_user(self, payload: Mapping[str, Any] | None) -> User:
        """
        Create a user from raw request fields.

        Args:
            payload: JSON body or query parameters

        Returns:
            The stored User

        Raises:
            ValidationError: If fields are missing or malformed
            ConflictError: If the email is already registered
        """
        request = parse_request(payload)

        if await self.repository.get_by_email(request.email) is not None:
            raise ConflictError(
                message="User with this email already exists",
                details={"email": request.email},
            )

        timestamp = iso_timestamp(self._clock())
        user = User(
            user_id=str(uuid.uuid4()),
            first_name=request.first_name,
            last_name=request.last_name,
            email=request.email,
            password_hash=hash_password(request.password),
            role=request.role,
            status="active",
            avatar=request.avatar or (request.first_name[0] + request.last_name[0]).upper(),
            created_at=timestamp,
            updated_at=timestamp,
        )
        try:
            await self.repository.create(user)
        except ConditionFailedError:
            raise ConflictError(
                message="User already exists", details={"user_id": user.user_id}
            )

        logger.info(
            "External user created",
            extra={"context": {"user_id": user.user_id, "role": user.role}},
        )
        return user
