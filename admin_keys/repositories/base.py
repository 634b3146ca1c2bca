"""Base repository class bound to one table of the durable store."""

from typing import Any

from admin_keys.store.base import DurableStore


class BaseRepository:
    """
    Base repository providing common table operations.

    Repositories receive the store at construction and never open their own
    connections, so one store instance serves the whole process.
    """

    def __init__(self, store: DurableStore, table_name: str) -> None:
        """
        Initialize repository with store and table name.

        Args:
            store: Durable store shared by all repositories
            table_name: Name of the backing table
        """
        self.store = store
        self.table_name = table_name

    async def put_item(self, item: dict[str, Any], **kwargs: Any) -> None:
        """Put item into the table."""
        await self.store.put(self.table_name, item, **kwargs)

    async def get_item(self, key: dict[str, Any]) -> dict[str, Any] | None:
        """Get item from the table by key."""
        return await self.store.get(self.table_name, key)

    async def delete_item(self, key: dict[str, Any]) -> None:
        """Delete item from the table."""
        await self.store.delete(self.table_name, key)

    async def update_item(self, key: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """Update item in the table and return its new attributes."""
        return await self.store.update(self.table_name, key, **kwargs)
