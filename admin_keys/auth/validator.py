"""Admin key validation: resolve a presented credential and classify it."""

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from admin_keys.auth.admin_key import usage_hint
from admin_keys.config import Settings
from admin_keys.exceptions import (
    AdminKeyAPIError,
    CredentialLookupError,
    ExpiredKeyError,
    InactiveKeyError,
    InvalidCredentialError,
    MissingCredentialError,
    QuotaExhaustedError,
)
from admin_keys.logging.config import get_logger
from admin_keys.models.admin_key import AdminKey, KeyStatus
from admin_keys.repositories.admin_key_repository import AdminKeyRepository
from admin_keys.utils.timestamps import iso_timestamp

logger = get_logger(__name__)


class RejectionReason(str, Enum):
    """Why a presented credential was refused."""

    MISSING_CREDENTIAL = "missing_credential"
    INVALID_CREDENTIAL = "invalid_credential"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    QUOTA_EXHAUSTED = "quota_exhausted"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class Accepted:
    """The credential may authorize the action. ``key`` is None for the legacy key."""

    key: AdminKey | None = None

    @property
    def is_legacy(self) -> bool:
        return self.key is None


@dataclass(frozen=True)
class Rejected:
    """
    The credential may not authorize the action.

    ``key`` is the resolved record when the secret matched one, so the audit
    trail can name it.
    """

    reason: RejectionReason
    usage: str
    details: Any = None
    key: AdminKey | None = None


Outcome = Accepted | Rejected


def rejection_error(rejected: Rejected) -> AdminKeyAPIError:
    """
    Map a rejection to the exception rendered for it.

    Args:
        rejected: Validator outcome

    Returns:
        Exception carrying the status code, error string and usage hint
    """
    reason = rejected.reason
    if reason is RejectionReason.MISSING_CREDENTIAL:
        return MissingCredentialError(usage=rejected.usage)
    if reason is RejectionReason.INVALID_CREDENTIAL:
        return InvalidCredentialError(usage=rejected.usage)
    if reason is RejectionReason.INACTIVE:
        return InactiveKeyError(details=rejected.details, usage=rejected.usage)
    if reason is RejectionReason.EXPIRED:
        return ExpiredKeyError(details=rejected.details, usage=rejected.usage)
    if reason is RejectionReason.QUOTA_EXHAUSTED:
        return QuotaExhaustedError(
            used_count=rejected.details["used_count"],
            limit=rejected.details["limit"],
            usage=rejected.usage,
        )
    return CredentialLookupError(usage=rejected.usage)


class KeyValidator:
    """
    Read-only credential check.

    Order of checks: missing, legacy key, lookup by secret, status, expiry,
    quota. The legacy key is matched before any store access, so it keeps
    working while the store is down. The validator never writes; usage is recorded by the caller only
    after the protected action succeeds.
    """

    def __init__(
        self,
        repository: AdminKeyRepository,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize KeyValidator.

        Args:
            repository: Admin key repository used for lookups
            settings: Settings holding the legacy key
            clock: Source of the current epoch time
        """
        self.repository = repository
        self._legacy_key = settings.legacy_admin_key
        self._clock = clock

    def is_legacy(self, credential: str) -> bool:
        """Constant-time comparison against the legacy key."""
        return secrets.compare_digest(
            credential.encode("utf-8"), self._legacy_key.encode("utf-8")
        )

    async def validate(self, credential: str | None, method: str) -> Outcome:
        """
        Resolve and classify a presented credential.

        Args:
            credential: Credential as extracted from the request
            method: HTTP method, used to pick the usage hint

        Returns:
            Accepted or Rejected outcome
        """
        usage = usage_hint(method)

        if not credential:
            return Rejected(RejectionReason.MISSING_CREDENTIAL, usage)

        if self.is_legacy(credential):
            return Accepted(key=None)

        try:
            key = await self.repository.get_by_secret(credential)
        except Exception as exc:
            logger.error(
                "Admin key lookup failed",
                exc_info=exc,
                extra={"context": {"exception_type": type(exc).__name__}},
            )
            return Rejected(RejectionReason.INTERNAL_ERROR, usage)

        if key is None:
            return Rejected(RejectionReason.INVALID_CREDENTIAL, usage)

        if key.status != KeyStatus.ACTIVE:
            return Rejected(
                RejectionReason.INACTIVE,
                usage,
                details=f"Key status: {key.status}",
                key=key,
            )

        if key.is_expired(self._clock()):
            return Rejected(
                RejectionReason.EXPIRED,
                usage,
                details=f"Expired at: {iso_timestamp(key.expires_at)}",
                key=key,
            )

        if key.used_count >= key.limit:
            return Rejected(
                RejectionReason.QUOTA_EXHAUSTED,
                usage,
                details={
                    "used_count": key.used_count,
                    "limit": key.limit,
                    "remaining": 0,
                },
                key=key,
            )

        return Accepted(key=key)
