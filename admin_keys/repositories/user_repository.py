"""User repository for DynamoDB operations."""

from typing import Optional

from admin_keys.config import Settings
from admin_keys.models.user import User
from admin_keys.repositories.base import BaseRepository
from admin_keys.store.base import DurableStore, Filter
from admin_keys.store.schema import USER_EMAIL_INDEX


class UserRepository(BaseRepository):
    """Repository for users created through the external API."""

    def __init__(self, store: DurableStore, settings: Settings) -> None:
        """Initialize UserRepository with the users table."""
        super().__init__(store, settings.dynamodb_table_users)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email using the EmailIndex GSI.

        Args:
            email: Lower-cased email address

        Returns:
            User if found, None otherwise
        """
        page = await self.store.query(
            self.table_name, USER_EMAIL_INDEX, "email", email, limit=1
        )
        if page.items:
            return User(**page.items[0])
        return None

    async def create(self, user: User) -> User:
        """
        Store a new user.

        Args:
            user: User model to store

        Returns:
            The created User
        """
        await self.put_item(
            user.model_dump(exclude_none=True),
            conditions=[Filter("user_id", "not_exists")],
        )
        return user
