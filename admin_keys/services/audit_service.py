"""Audit logging of admin-key-authorized actions."""

import secrets
import time
from collections.abc import Callable
from typing import Any, Optional

from admin_keys.config import Settings
from admin_keys.logging.config import get_logger
from admin_keys.models.admin_key import AdminKey
from admin_keys.models.audit_record import (
    LEGACY_KEY_SENTINEL,
    MISSING_SECRET_SENTINEL,
    UNRESOLVED_KEY_SENTINEL,
    AuditRecord,
)
from admin_keys.repositories.audit_log_repository import AuditLogRepository
from admin_keys.schemas.audit import AuditLogPage
from admin_keys.utils.pagination import decode_cursor, encode_cursor
from admin_keys.utils.timestamps import days_from, iso_timestamp

logger = get_logger(__name__)


class LogIdGenerator:
    """
    Creation-ordered log identifiers.

    Format is ``log_<epoch ms>_<sequence>_<random>``. The sequence counts
    ids issued by this process within the same millisecond, so ties sort in
    issue order; the random suffix keeps ids from different processes apart.
    """

    def __init__(self) -> None:
        self._last_ms = -1
        self._sequence = 0

    def __call__(self, now: float) -> str:
        millis = int(now * 1000)
        if millis == self._last_ms:
            self._sequence += 1
        else:
            self._last_ms = millis
            self._sequence = 0
        return f"log_{millis:013d}_{self._sequence:06d}_{secrets.token_hex(4)}"


class AuditLogger:
    """
    Writes one audit record per authorization attempt and serves queries.

    ``record`` never raises; write failures go to the operational log.
    """

    def __init__(
        self,
        repository: AuditLogRepository,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize AuditLogger.

        Args:
            repository: Audit log repository
            settings: Settings with retention window and page sizes
            clock: Source of the current epoch time
        """
        self.repository = repository
        self.settings = settings
        self._clock = clock
        self._log_ids = LogIdGenerator()

    async def record(
        self,
        subject: dict[str, Any],
        key: AdminKey | None,
        success: bool,
        error_message: Optional[str] = None,
        legacy: bool = False,
        presented_secret: Optional[str] = None,
        usage_before: Optional[int] = None,
        usage_after: Optional[int] = None,
    ) -> AuditRecord | None:
        """
        Append an audit record.

        Args:
            subject: Identifying fields of the action target
            key: Resolved key record, None for the legacy key or an
                unresolved credential
            success: Whether the action succeeded
            error_message: Failure reason (required when not success)
            legacy: The legacy key authorized (or attempted) the action
            presented_secret: Credential as presented, recorded when no
                key record was resolved
            usage_before: Key usage before the action
            usage_after: Key usage after the action

        Returns:
            The stored record, or None if writing failed
        """
        now = self._clock()
        if key is not None:
            key_id, secret = key.key_id, key.secret
            description = key.description
        elif legacy:
            key_id = LEGACY_KEY_SENTINEL
            secret = presented_secret or LEGACY_KEY_SENTINEL
            description = "Legacy Admin Key"
        else:
            key_id = UNRESOLVED_KEY_SENTINEL
            secret = presented_secret or MISSING_SECRET_SENTINEL
            description = None

        try:
            record = AuditRecord(
                log_id=self._log_ids(now),
                key_id=key_id,
                secret=secret,
                action_subject=subject,
                success=success,
                error_message=None if success else (error_message or "unknown error"),
                created_at=iso_timestamp(now),
                retention_deadline=days_from(now, self.settings.audit_retention_days),
                usage_before=usage_before,
                usage_after=usage_after,
                key_description=description,
                environment=self.settings.environment,
            )
            await self.repository.append(record)
        except Exception as exc:
            logger.error(
                "Error writing audit record",
                exc_info=exc,
                extra={"context": {"admin_key_id": key_id, "success": success}},
            )
            return None

        logger.info(
            "Audit record written",
            extra={
                "context": {
                    "log_id": record.log_id,
                    "admin_key_id": key_id,
                    "success": success,
                }
            },
        )
        return record

    async def query(
        self,
        key_id: Optional[str] = None,
        secret: Optional[str] = None,
        success: Optional[bool] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> AuditLogPage:
        """
        Page through audit records, most recent first.

        Args:
            key_id: Filter by admin key id
            secret: Filter by presented credential
            success: Filter by outcome
            start_date: Inclusive ISO 8601 lower bound
            end_date: Inclusive ISO 8601 upper bound
            limit: Page size, clamped to the configured maximum
            cursor: Opaque cursor from a previous page

        Returns:
            AuditLogPage with records and the next cursor
        """
        page_size = min(
            max(1, limit or self.settings.default_audit_page_size),
            self.settings.max_audit_page_size,
        )
        records, next_key = await self.repository.find(
            key_id=key_id,
            secret=secret,
            success=success,
            start_date=start_date,
            end_date=end_date,
            limit=page_size,
            last_evaluated_key=decode_cursor(cursor),
        )
        return AuditLogPage(
            logs=records,
            count=len(records),
            next_cursor=encode_cursor(next_key),
            has_more=next_key is not None,
        )
