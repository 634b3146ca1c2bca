"""Quota enforcement: atomic usage accounting for admin keys."""

import time
from collections.abc import Callable
from dataclasses import dataclass

from admin_keys.config import Settings
from admin_keys.exceptions import QuotaExhaustedError
from admin_keys.logging.config import get_logger
from admin_keys.models.admin_key import AdminKey
from admin_keys.repositories.admin_key_repository import AdminKeyRepository
from admin_keys.store.base import ConditionFailedError
from admin_keys.utils.timestamps import iso_timestamp

logger = get_logger(__name__)


@dataclass(frozen=True)
class UsageUpdate:
    """
    Result of recording one authorized action.

    ``recorded`` is False when the increment failed and ``used_count`` is
    only an estimate.
    """

    key_id: str
    used_count: int
    limit: int
    recorded: bool = True

    @property
    def remaining(self) -> int:
        return max(self.limit - self.used_count, 0)


class QuotaEnforcer:
    """
    Increments ``used_count`` after a protected action succeeds.

    With ``quota_strategy="conditional"`` the increment only applies while
    ``used_count < limit``; a failed condition is raised as a late
    ``QuotaExhaustedError``. With ``"unconditional"`` the add always applies,
    so concurrent requests at the boundary can push usage past the limit.
    """

    def __init__(
        self,
        repository: AdminKeyRepository,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize QuotaEnforcer.

        Args:
            repository: Admin key repository
            settings: Settings selecting the quota strategy
            clock: Source of the current epoch time
        """
        self.repository = repository
        self.conditional = settings.quota_strategy == "conditional"
        self._clock = clock

    async def record_usage(self, key: AdminKey | None) -> UsageUpdate | None:
        """
        Record one authorized action against a key.

        Args:
            key: Key record as read by the validator, None for the legacy key

        Returns:
            UsageUpdate with the post-increment count, None for the legacy key

        Raises:
            QuotaExhaustedError: Conditional strategy only, when another
                request consumed the last unit first
        """
        if key is None:
            return None

        try:
            attributes = await self.repository.increment_usage(
                key.key_id,
                updated_at=iso_timestamp(self._clock()),
                enforce_limit=self.conditional,
            )
        except ConditionFailedError:
            if not self.conditional:
                # Only the existence check can fail here: the key was deleted
                logger.warning(
                    "Admin key vanished before usage could be recorded",
                    extra={"context": {"admin_key_id": key.key_id}},
                )
                return UsageUpdate(key.key_id, key.used_count + 1, key.limit, False)
            logger.info(
                "Admin key quota exhausted at increment",
                extra={
                    "context": {
                        "admin_key_id": key.key_id,
                        "limit": key.limit,
                    }
                },
            )
            raise QuotaExhaustedError(used_count=key.limit, limit=key.limit)
        except Exception as exc:
            # Never fails the completed action
            logger.error(
                "Error updating admin key usage",
                exc_info=exc,
                extra={"context": {"admin_key_id": key.key_id}},
            )
            return UsageUpdate(key.key_id, key.used_count + 1, key.limit, False)

        used_count = attributes.get("used_count", key.used_count + 1)
        limit = attributes.get("limit", key.limit)
        return UsageUpdate(key.key_id, int(used_count), int(limit))
