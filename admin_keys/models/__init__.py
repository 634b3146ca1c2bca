"""Data models for the Admin Key Service."""

from admin_keys.models.admin_key import AdminKey, KeyStatus
from admin_keys.models.audit_record import LEGACY_KEY_SENTINEL, AuditRecord
from admin_keys.models.user import User

__all__ = ["AdminKey", "AuditRecord", "KeyStatus", "LEGACY_KEY_SENTINEL", "User"]
