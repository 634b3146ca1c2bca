"""Admin key lifecycle: issue, inspect, patch and revoke keys."""

import time
from collections.abc import Callable
from typing import Any, Optional

from admin_keys.auth.admin_key import generate_key_id, generate_secret
from admin_keys.config import Settings
from admin_keys.exceptions import ConflictError, NotFoundError, ValidationError
from admin_keys.logging.config import get_logger
from admin_keys.models.admin_key import AdminKey, KeyStatus
from admin_keys.repositories.admin_key_repository import AdminKeyRepository
from admin_keys.store.base import ConditionFailedError
from admin_keys.utils.timestamps import days_from, iso_timestamp

logger = get_logger(__name__)


def _require_positive(name: str, value: Optional[int]) -> None:
    if value is not None and value <= 0:
        raise ValidationError(
            message=f"{name} must be greater than 0",
            details={"field": name, "value": value},
        )


class KeyLifecycleManager:
    """
    Service layer for admin key management.

    Works on the admin-trusted channel; callers are not quota counted.
    ``used_count`` is never written here.
    """

    def __init__(
        self,
        repository: AdminKeyRepository,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize KeyLifecycleManager.

        Args:
            repository: Admin key repository
            settings: Settings with key prefix and default lifetime
            clock: Source of the current epoch time
        """
        self.repository = repository
        self.settings = settings
        self._clock = clock

    async def create(
        self,
        limit: int,
        description: str = "",
        expires_in_days: Optional[int] = None,
        created_by: str = "admin",
    ) -> AdminKey:
        """
        Issue a new admin key.

        Args:
            limit: Maximum actions the key may authorize
            description: Free-text label
            expires_in_days: Lifetime in days, defaults to the configured value
            created_by: Issuer recorded on the key

        Returns:
            The stored AdminKey, including its secret

        Raises:
            ValidationError: If limit or expires_in_days is not positive
        """
        if expires_in_days is None:
            expires_in_days = self.settings.default_expires_in_days
        _require_positive("limit", limit)
        _require_positive("expires_in_days", expires_in_days)

        now = self._clock()
        timestamp = iso_timestamp(now)
        admin_key = AdminKey(
            key_id=generate_key_id(),
            secret=generate_secret(self.settings.admin_key_prefix),
            limit=limit,
            used_count=0,
            description=description,
            status=KeyStatus.ACTIVE,
            created_at=timestamp,
            updated_at=timestamp,
            expires_at=days_from(now, expires_in_days),
            created_by=created_by,
        )
        await self.repository.create(admin_key)

        logger.info(
            "Admin key created",
            extra={
                "context": {
                    "admin_key_id": admin_key.key_id,
                    "limit": limit,
                    "expires_at": admin_key.expires_at,
                    "created_by": created_by,
                }
            },
        )
        return admin_key

    async def get(self, key_id: str) -> AdminKey:
        """
        Fetch one admin key.

        Raises:
            NotFoundError: If no key has this id
        """
        admin_key = await self.repository.get_by_id(key_id)
        if admin_key is None:
            raise NotFoundError(
                message="Admin key not found", details={"key_id": key_id}
            )
        return admin_key

    async def update(
        self,
        key_id: str,
        limit: Optional[int] = None,
        description: Optional[str] = None,
        status: Optional[KeyStatus | str] = None,
        expires_in_days: Optional[int] = None,
    ) -> AdminKey:
        """
        Patch an existing admin key.

        Only the given fields change; ``updated_at`` is always refreshed and
        ``expires_in_days`` is counted from now.

        Args:
            key_id: Key to update
            limit: New quota limit
            description: New description
            status: New status (active, inactive or suspended)
            expires_in_days: New lifetime in days

        Returns:
            The updated AdminKey

        Raises:
            ValidationError: If a numeric field is not positive or the status
                is unknown
            NotFoundError: If no key has this id
            ConflictError: If the new limit is below the current usage
        """
        _require_positive("limit", limit)
        _require_positive("expires_in_days", expires_in_days)

        now = self._clock()
        fields: dict[str, Any] = {"updated_at": iso_timestamp(now)}
        if limit is not None:
            fields["limit"] = limit
        if description is not None:
            fields["description"] = description
        if status is not None:
            try:
                fields["status"] = KeyStatus(status).value
            except ValueError:
                raise ValidationError(
                    message=f"Invalid status: {status}",
                    details={
                        "field": "status",
                        "allowed": [s.value for s in KeyStatus],
                    },
                )
        if expires_in_days is not None:
            fields["expires_at"] = days_from(now, expires_in_days)

        try:
            admin_key = await self.repository.update_fields(key_id, fields)
        except ConditionFailedError:
            current = await self.repository.get_by_id(key_id)
            if current is None:
                raise NotFoundError(
                    message="Admin key not found", details={"key_id": key_id}
                )
            # used_count only grows, so the limit check is what failed
            raise ConflictError(
                message="Limit is below the key's current usage",
                details={
                    "key_id": key_id,
                    "used_count": current.used_count,
                    "limit": limit,
                },
            )

        logger.info(
            "Admin key updated",
            extra={
                "context": {
                    "admin_key_id": key_id,
                    "fields": sorted(k for k in fields if k != "updated_at"),
                }
            },
        )
        return admin_key

    async def delete(self, key_id: str) -> None:
        """Hard delete a key. Deleting a missing key is not an error."""
        await self.repository.delete(key_id)
        logger.info(
            "Admin key deleted", extra={"context": {"admin_key_id": key_id}}
        )

    async def list(self) -> list[AdminKey]:
        """Every admin key with its current usage."""
        return await self.repository.list_all()
