"""
In-process implementation of the durable store.

Used for local development (``STORE_BACKEND=memory``) and the test suite.
Every operation yields to the event loop once before touching data, then
completes without further awaits, so each call is atomic with respect to
other coroutines the same way a single DynamoDB request is.
"""

import asyncio
import copy
import operator
from collections.abc import Sequence
from typing import Any

from admin_keys.store.base import (
    AttrRef,
    ConditionFailedError,
    DurableStore,
    Filter,
    Page,
    StoreError,
)
from admin_keys.store.schema import TableSchema

_MISSING = object()

_COMPARATORS = {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
}


def matches(item: dict[str, Any] | None, f: Filter) -> bool:
    """Evaluate one filter against an item using DynamoDB semantics."""
    current = item.get(f.attribute, _MISSING) if item else _MISSING
    if f.op == "exists":
        return current is not _MISSING
    if f.op == "not_exists":
        return current is _MISSING
    if f.op == "ne" and current is _MISSING:
        return True
    if current is _MISSING:
        return False

    expected = f.value
    if isinstance(expected, AttrRef):
        expected = item.get(expected.name, _MISSING) if item else _MISSING
        if expected is _MISSING:
            return False
    try:
        return _COMPARATORS[f.op](current, expected)
    except TypeError:
        return False


class MemoryStore(DurableStore):
    """Dictionary-backed store honouring the table layouts in ``schema``."""

    def __init__(self, schemas: dict[str, TableSchema]) -> None:
        """
        Initialize the store.

        Args:
            schemas: Table layouts keyed by table name
        """
        self.schemas = schemas
        self._tables: dict[str, dict[tuple, dict[str, Any]]] = {
            name: {} for name in schemas
        }

    def _schema(self, table: str) -> TableSchema:
        try:
            return self.schemas[table]
        except KeyError:
            raise StoreError(f"Requested resource not found: {table}") from None

    def _key_tuple(self, table: str, key: dict[str, Any]) -> tuple:
        schema = self._schema(table)
        try:
            return tuple(key[name] for name in schema.primary_key(key))
        except KeyError as exc:
            raise StoreError(f"Key is missing attribute {exc} for {table}") from None

    @staticmethod
    def _check(item: dict[str, Any] | None, conditions: Sequence[Filter]) -> None:
        for condition in conditions:
            if not matches(item, condition):
                raise ConditionFailedError(
                    f"Condition on {condition.attribute!r} failed"
                )

    @staticmethod
    def _resume_after(
        items: list[dict[str, Any]],
        schema: TableSchema,
        start_key: dict[str, Any] | None,
    ) -> list[dict[str, Any]]:
        if not start_key:
            return items
        wanted = schema.primary_key(start_key)
        for position, item in enumerate(items):
            if schema.primary_key(item) == wanted:
                return items[position + 1 :]
        return []

    @staticmethod
    def _paginate(
        items: list[dict[str, Any]],
        schema: TableSchema,
        limit: int | None,
        index_attrs: Sequence[str] = (),
    ) -> Page:
        if not limit or len(items) <= limit:
            return Page(items=[copy.deepcopy(i) for i in items])
        page_items = items[:limit]
        last = page_items[-1]
        last_key = schema.primary_key(last)
        for name in index_attrs:
            if name and name in last:
                last_key[name] = last[name]
        return Page(
            items=[copy.deepcopy(i) for i in page_items],
            last_evaluated_key=last_key,
        )

    async def get(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        key_tuple = self._key_tuple(table, key)
        item = self._tables[table].get(key_tuple)
        return copy.deepcopy(item) if item else None

    async def put(
        self,
        table: str,
        item: dict[str, Any],
        conditions: Sequence[Filter] = (),
    ) -> None:
        await asyncio.sleep(0)
        key = self._key_tuple(table, item)
        self._check(self._tables[table].get(key), conditions)
        self._tables[table][key] = copy.deepcopy(item)

    async def update(
        self,
        table: str,
        key: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increment: dict[str, int] | None = None,
        conditions: Sequence[Filter] = (),
    ) -> dict[str, Any]:
        await asyncio.sleep(0)
        schema = self._schema(table)
        key_tuple = self._key_tuple(table, key)
        current = self._tables[table].get(key_tuple)
        self._check(current, conditions)

        # Like DynamoDB, an unconditional update creates the item
        updated = copy.deepcopy(current) if current else dict(schema.primary_key(key))
        updated.update(copy.deepcopy(set_fields or {}))
        for attr, amount in (increment or {}).items():
            updated[attr] = updated.get(attr, 0) + amount

        self._tables[table][key_tuple] = updated
        return copy.deepcopy(updated)

    async def delete(self, table: str, key: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        key_tuple = self._key_tuple(table, key)
        self._tables[table].pop(key_tuple, None)

    async def query(
        self,
        table: str,
        index: str,
        key_name: str,
        key_value: Any,
        limit: int | None = None,
        start_key: dict[str, Any] | None = None,
        newest_first: bool = False,
        filters: Sequence[Filter] = (),
    ) -> Page:
        await asyncio.sleep(0)
        schema = self._schema(table)
        index_schema = schema.indexes.get(index)
        if index_schema is None or index_schema.partition_key != key_name:
            raise StoreError(f"Index {index} on {table} cannot be queried by {key_name}")

        found = [
            item
            for item in self._tables[table].values()
            if item.get(key_name) == key_value
        ]
        if index_schema.sort_key:
            sort_key = index_schema.sort_key
            found.sort(key=lambda i: i.get(sort_key, ""), reverse=newest_first)
        elif newest_first:
            found.reverse()

        found = self._resume_after(found, schema, start_key)
        found = [i for i in found if all(matches(i, f) for f in filters)]
        return self._paginate(
            found,
            schema,
            limit,
            (index_schema.partition_key, index_schema.sort_key),
        )

    async def scan(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        limit: int | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> Page:
        await asyncio.sleep(0)
        schema = self._schema(table)
        items = self._resume_after(list(self._tables[table].values()), schema, start_key)
        found = [i for i in items if all(matches(i, f) for f in filters)]
        return self._paginate(found, schema, limit)

    def clear(self) -> None:
        """Drop every item in every table (useful for testing)."""
        for rows in self._tables.values():
            rows.clear()
