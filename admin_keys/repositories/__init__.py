"""Repository layer for DynamoDB operations."""

from admin_keys.repositories.admin_key_repository import AdminKeyRepository
from admin_keys.repositories.audit_log_repository import AuditLogRepository
from admin_keys.repositories.user_repository import UserRepository

__all__ = ["AdminKeyRepository", "AuditLogRepository", "UserRepository"]
