"""Durable store adapters."""

from admin_keys.config import Settings
from admin_keys.store.base import (
    AttrRef,
    ConditionFailedError,
    DurableStore,
    Filter,
    Page,
    StoreError,
)
from admin_keys.store.dynamodb import DynamoDBStore
from admin_keys.store.memory import MemoryStore
from admin_keys.store.schema import table_schemas


def create_store(settings: Settings) -> DurableStore:
    """Build the store selected by ``settings.store_backend``."""
    if settings.store_backend == "memory":
        return MemoryStore(table_schemas(settings))
    return DynamoDBStore(settings)


__all__ = [
    "AttrRef",
    "ConditionFailedError",
    "DurableStore",
    "DynamoDBStore",
    "Filter",
    "MemoryStore",
    "Page",
    "StoreError",
    "create_store",
    "table_schemas",
]
