"""Admin key repository for DynamoDB operations."""

from typing import Any, Optional

from admin_keys.config import Settings
from admin_keys.models.admin_key import AdminKey
from admin_keys.repositories.base import BaseRepository
from admin_keys.store.base import AttrRef, DurableStore, Filter
from admin_keys.store.schema import ADMIN_KEY_SECRET_INDEX


class AdminKeyRepository(BaseRepository):
    """
    Repository for admin key records.

    ``used_count`` is written once, at creation. After that it changes only
    through ``increment_usage``.
    """

    def __init__(self, store: DurableStore, settings: Settings) -> None:
        """Initialize AdminKeyRepository with the admin keys table."""
        super().__init__(store, settings.dynamodb_table_admin_keys)

    async def create(self, admin_key: AdminKey) -> AdminKey:
        """
        Store a new admin key.

        Args:
            admin_key: AdminKey model to store

        Returns:
            The created AdminKey

        Raises:
            ConditionFailedError: If a key with the same key_id exists
        """
        await self.put_item(
            admin_key.model_dump(),
            conditions=[Filter("key_id", "not_exists")],
        )
        return admin_key

    async def get_by_id(self, key_id: str) -> Optional[AdminKey]:
        """
        Get admin key by ID.

        Args:
            key_id: Admin key partition key

        Returns:
            AdminKey if found, None otherwise
        """
        item = await self.get_item({"key_id": key_id})
        if item:
            return AdminKey(**item)
        return None

    async def get_by_secret(self, secret: str) -> Optional[AdminKey]:
        """
        Get admin key by its secret using the AdminKeyIndex GSI.

        Args:
            secret: Bearer credential as presented

        Returns:
            AdminKey if found, None otherwise
        """
        page = await self.store.query(
            self.table_name,
            ADMIN_KEY_SECRET_INDEX,
            "secret",
            secret,
            limit=1,
        )
        if page.items:
            return AdminKey(**page.items[0])
        return None

    async def list_all(self) -> list[AdminKey]:
        """Scan every admin key."""
        items = await self.store.scan_all(self.table_name)
        return [AdminKey(**item) for item in items]

    async def update_fields(
        self, key_id: str, fields: dict[str, Any]
    ) -> AdminKey:
        """
        Patch mutable fields of an existing key.

        Args:
            key_id: Admin key partition key
            fields: Attributes to overwrite (never ``used_count``)

        Returns:
            The updated AdminKey

        Raises:
            ConditionFailedError: If the key does not exist or, when
                ``limit`` is patched, usage already exceeds the new limit
        """
        if "used_count" in fields:
            raise ValueError("used_count can only change through increment_usage")
        conditions = [Filter("key_id", "exists")]
        if "limit" in fields:
            conditions.append(Filter("used_count", "lte", fields["limit"]))
        attributes = await self.update_item(
            {"key_id": key_id},
            set_fields=fields,
            conditions=conditions,
        )
        return AdminKey(**attributes)

    async def increment_usage(
        self, key_id: str, updated_at: str, enforce_limit: bool = True
    ) -> dict[str, Any]:
        """
        Atomically add one to ``used_count``.

        Args:
            key_id: Admin key partition key
            updated_at: Timestamp to store alongside the increment
            enforce_limit: Only increment while ``used_count < limit``

        Returns:
            The key's attributes after the increment

        Raises:
            ConditionFailedError: If the key is gone or, with
                ``enforce_limit``, already at its limit
        """
        conditions = [Filter("key_id", "exists")]
        if enforce_limit:
            conditions.append(Filter("used_count", "lt", AttrRef("limit")))
        return await self.update_item(
            {"key_id": key_id},
            set_fields={"updated_at": updated_at},
            increment={"used_count": 1},
            conditions=conditions,
        )

    async def delete(self, key_id: str) -> None:
        """Hard delete a key; missing keys are ignored."""
        await self.delete_item({"key_id": key_id})
