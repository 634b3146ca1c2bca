"""Pydantic schemas for audit log queries."""

from typing import List, Optional

from pydantic import BaseModel, Field

from admin_keys.models.audit_record import AuditRecord


class AuditLogPage(BaseModel):
    """
    One page of audit records, most recent first.

    Attributes:
        logs: Audit records on this page
        count: Number of records on this page
        next_cursor: Opaque cursor for the next page (null on the last page)
        has_more: Whether another page may follow
    """

    logs: List[AuditRecord] = Field(default_factory=list)
    count: int = Field(0, description="Records on this page")
    next_cursor: Optional[str] = Field(
        None, description="Next page cursor (null if last page)"
    )
    has_more: bool = Field(False, description="More records available")


class AuditLogResponse(AuditLogPage):
    """Response schema for the audit log endpoint."""

    success: bool = True
