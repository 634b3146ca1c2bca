"""Audit log repository for DynamoDB operations."""

from typing import Any, Optional

from admin_keys.config import Settings
from admin_keys.models.audit_record import AuditRecord
from admin_keys.repositories.base import BaseRepository
from admin_keys.store.base import DurableStore, Filter
from admin_keys.store.schema import AUDIT_KEY_ID_INDEX, AUDIT_SECRET_INDEX


class AuditLogRepository(BaseRepository):
    """
    Repository for audit records.

    Records are append-only: there is no update or delete method. Expiry is
    left to the table's TTL on ``retention_deadline``.
    """

    def __init__(self, store: DurableStore, settings: Settings) -> None:
        """Initialize AuditLogRepository with the audit logs table."""
        super().__init__(store, settings.dynamodb_table_audit_logs)

    async def append(self, record: AuditRecord) -> AuditRecord:
        """
        Write a new audit record.

        Args:
            record: AuditRecord to store

        Returns:
            The stored AuditRecord
        """
        await self.put_item(
            record.model_dump(exclude_none=True),
            conditions=[Filter("log_id", "not_exists")],
        )
        return record

    async def find(
        self,
        key_id: Optional[str] = None,
        secret: Optional[str] = None,
        success: Optional[bool] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: int = 100,
        last_evaluated_key: Optional[dict[str, Any]] = None,
    ) -> tuple[list[AuditRecord], Optional[dict[str, Any]]]:
        """
        Find audit records, most recent first.

        ``key_id`` and ``secret`` use their GSIs (read newest-first). Without
        either, the table is scanned with the remaining filters and the page
        is sorted by ``created_at`` descending.

        Args:
            key_id: Only records for this admin key
            secret: Only records for this presented credential
            success: Only successful (True) or failed (False) attempts
            start_date: Inclusive lower bound on ``created_at``
            end_date: Inclusive upper bound on ``created_at``
            limit: Page size
            last_evaluated_key: Store cursor from the previous page

        Returns:
            Tuple of (records, next store cursor or None)
        """
        filters: list[Filter] = []
        if success is not None:
            filters.append(Filter("success", "eq", success))
        if start_date:
            filters.append(Filter("created_at", "gte", start_date))
        if end_date:
            filters.append(Filter("created_at", "lte", end_date))

        if key_id or secret:
            index, attr, value = (
                (AUDIT_KEY_ID_INDEX, "key_id", key_id)
                if key_id
                else (AUDIT_SECRET_INDEX, "secret", secret)
            )
            if key_id and secret:
                filters.append(Filter("secret", "eq", secret))
            page = await self.store.query(
                self.table_name,
                index,
                attr,
                value,
                limit=limit,
                start_key=last_evaluated_key,
                newest_first=True,
                filters=filters,
            )
            records = [AuditRecord(**item) for item in page.items]
        else:
            page = await self.store.scan(
                self.table_name,
                filters=filters,
                limit=limit,
                start_key=last_evaluated_key,
            )
            records = [AuditRecord(**item) for item in page.items]
            records.sort(key=lambda r: r.created_at, reverse=True)

        return records, page.last_evaluated_key
