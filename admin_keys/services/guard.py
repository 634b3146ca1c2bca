"""Admin-key protected action pipeline: validate, act, count, audit."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from admin_keys.auth.admin_key import usage_hint
from admin_keys.auth.validator import KeyValidator, Rejected, rejection_error
from admin_keys.exceptions import AdminKeyAPIError, QuotaExhaustedError
from admin_keys.logging.config import get_logger
from admin_keys.schemas.admin_key import AdminKeyInfo
from admin_keys.services.audit_service import AuditLogger
from admin_keys.services.quota_service import QuotaEnforcer

logger = get_logger(__name__)

T = TypeVar("T")


def _failure_message(exc: BaseException) -> str:
    if isinstance(exc, AdminKeyAPIError):
        if isinstance(exc.details, str) and exc.details:
            return f"{exc.message} ({exc.details})"
        return exc.message
    return str(exc) or type(exc).__name__


@dataclass(frozen=True)
class ProtectedResult(Generic[T]):
    """
    Outcome of a successfully authorized action.

    ``admin_key_info`` is None when the legacy key authorized the action.
    """

    result: T
    admin_key_id: Optional[str] = None
    admin_key_info: Optional[AdminKeyInfo] = None


class ProtectedActionGuard:
    """
    Runs one action under an admin key.

    Order is fixed: validate the credential, run the action, record usage,
    write the audit record. Exactly one audit record is written per call,
    whatever the outcome.
    """

    def __init__(
        self,
        validator: KeyValidator,
        enforcer: QuotaEnforcer,
        audit: AuditLogger,
    ) -> None:
        """
        Initialize ProtectedActionGuard.

        Args:
            validator: Credential validator
            enforcer: Usage counter
            audit: Audit trail writer
        """
        self.validator = validator
        self.enforcer = enforcer
        self.audit = audit

    async def execute(
        self,
        credential: Optional[str],
        method: str,
        subject: dict[str, Any],
        action: Callable[[], Awaitable[T]],
    ) -> ProtectedResult[T]:
        """
        Authorize and run ``action``.

        Args:
            credential: Credential extracted from the request
            method: HTTP method of the request
            subject: Identifying fields of the action target, for the audit
            action: Coroutine factory performing the protected work

        Returns:
            ProtectedResult with the action's result and key usage

        Raises:
            AdminKeyAPIError: Credential rejected, action failed with a
                domain error, or quota exhausted at increment
            Exception: Whatever the action raised otherwise
        """
        outcome = await self.validator.validate(credential, method)

        if isinstance(outcome, Rejected):
            error = rejection_error(outcome)
            pre_check = outcome.key.used_count if outcome.key else None
            await self.audit.record(
                subject,
                outcome.key,
                success=False,
                error_message=_failure_message(error),
                presented_secret=credential,
                usage_before=pre_check,
                usage_after=pre_check,
            )
            raise error

        key = outcome.key
        legacy = outcome.is_legacy
        usage_before = key.used_count if key else None

        try:
            result = await action()
        except Exception as exc:
            await self.audit.record(
                subject,
                key,
                success=False,
                error_message=_failure_message(exc),
                legacy=legacy,
                usage_before=usage_before,
                usage_after=usage_before,
            )
            raise

        try:
            update = await self.enforcer.record_usage(key)
        except QuotaExhaustedError as exc:
            exc.usage = usage_hint(method)
            await self.audit.record(
                subject,
                key,
                success=False,
                error_message=exc.message,
                usage_before=usage_before,
                usage_after=usage_before,
            )
            raise

        usage_after = update.used_count if update else None
        await self.audit.record(
            subject,
            key,
            success=True,
            legacy=legacy,
            usage_before=usage_before,
            usage_after=usage_after,
        )

        if update is None:
            return ProtectedResult(result=result)
        return ProtectedResult(
            result=result,
            admin_key_id=update.key_id,
            admin_key_info=AdminKeyInfo(
                key_id=update.key_id,
                used_count=update.used_count,
                limit=update.limit,
                remaining=update.remaining,
            ),
        )
