"""Shared fixtures: in-memory store, controllable clock, wired services."""

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from admin_keys.auth.validator import KeyValidator
from admin_keys.config import Settings
from admin_keys.main import create_app
from admin_keys.repositories import (
    AdminKeyRepository,
    AuditLogRepository,
    UserRepository,
)
from admin_keys.services.admin_key_service import KeyLifecycleManager
from admin_keys.services.audit_service import AuditLogger
from admin_keys.services.guard import ProtectedActionGuard
from admin_keys.services.quota_service import QuotaEnforcer
from admin_keys.services.user_service import ExternalUserService
from admin_keys.store import MemoryStore, table_schemas

LEGACY_KEY = "legacy-test-key-0000"

# 2026-01-01T00:00:00Z
START_TIME = 1767225600.0


class FakeClock:
    """Clock returning a settable epoch time."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory deployment, ignoring any local .env file."""
    return Settings(
        _env_file=None,
        store_backend="memory",
        legacy_admin_key=LEGACY_KEY,
        environment="test",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(settings: Settings) -> MemoryStore:
    return MemoryStore(table_schemas(settings))


@pytest.fixture
def key_repository(store, settings) -> AdminKeyRepository:
    return AdminKeyRepository(store, settings)


@pytest.fixture
def audit_repository(store, settings) -> AuditLogRepository:
    return AuditLogRepository(store, settings)


@pytest.fixture
def user_repository(store, settings) -> UserRepository:
    return UserRepository(store, settings)


@pytest.fixture
def lifecycle(key_repository, settings, clock) -> KeyLifecycleManager:
    return KeyLifecycleManager(key_repository, settings, clock)


@pytest.fixture
def validator(key_repository, settings, clock) -> KeyValidator:
    return KeyValidator(key_repository, settings, clock)


@pytest.fixture
def enforcer(key_repository, settings, clock) -> QuotaEnforcer:
    return QuotaEnforcer(key_repository, settings, clock)


@pytest.fixture
def audit(audit_repository, settings, clock) -> AuditLogger:
    return AuditLogger(audit_repository, settings, clock)


@pytest.fixture
def user_service(user_repository, clock) -> ExternalUserService:
    return ExternalUserService(user_repository, clock)


@pytest.fixture
def guard(validator, enforcer, audit) -> ProtectedActionGuard:
    return ProtectedActionGuard(validator, enforcer, audit)


@pytest.fixture
def app(settings, store):
    """Application sharing the test store."""
    return create_app(settings, store=store)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def legacy_key() -> str:
    return LEGACY_KEY
