"""Audit log query endpoint."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from admin_keys.auth.dependencies import get_audit_logger
from admin_keys.schemas.audit import AuditLogResponse
from admin_keys.services.audit_service import AuditLogger

router = APIRouter(prefix="/api/admin", tags=["Audit Logs"])


@router.get(
    "/logs",
    response_model=AuditLogResponse,
    summary="Query Audit Logs",
    description=(
        "Audit records of admin-key-authorized actions, most recent first. "
        "Pass `next_cursor` from a response as `cursor` to get the next page."
    ),
)
async def query_audit_logs(
    key_id: Optional[str] = Query(None, description="Filter by admin key id"),
    secret: Optional[str] = Query(None, description="Filter by admin key secret"),
    success: Optional[bool] = Query(None, description="Filter by outcome"),
    start_date: Optional[str] = Query(None, description="ISO 8601 lower bound"),
    end_date: Optional[str] = Query(None, description="ISO 8601 upper bound"),
    limit: int = Query(100, ge=1, le=500, description="Page size"),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AuditLogResponse:
    """
    Page through audit records.

    Args:
        key_id: Admin key id filter
        secret: Admin key secret filter
        success: Outcome filter
        start_date: Inclusive lower bound on created_at
        end_date: Inclusive upper bound on created_at
        limit: Page size (1-500)
        cursor: Cursor from the previous page
        audit: Audit log service

    Returns:
        AuditLogResponse with records and the next cursor
    """
    page = await audit.query(
        key_id=key_id,
        secret=secret,
        success=success,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        cursor=cursor,
    )
    return AuditLogResponse(**page.model_dump())
