"""Abstract durable key-value store used by the repositories."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

FilterOp = Literal["eq", "ne", "lt", "lte", "gt", "gte", "exists", "not_exists"]


class StoreError(Exception):
    """Raised when the backing store fails an operation."""


class ConditionFailedError(StoreError):
    """Raised when a conditional write's condition does not hold."""


@dataclass(frozen=True)
class AttrRef:
    """Reference to another attribute of the same item, used as a filter operand."""

    name: str


@dataclass(frozen=True)
class Filter:
    """
    A single comparison against an item attribute.

    Used both as a scan filter and as a write condition. ``value`` may be an
    ``AttrRef`` to compare two attributes of the same item.
    """

    attribute: str
    op: FilterOp = "eq"
    value: Any = None


@dataclass
class Page:
    """One page of a query or scan."""

    items: list[dict[str, Any]] = field(default_factory=list)
    last_evaluated_key: dict[str, Any] | None = None


class DurableStore(ABC):
    """
    Async table interface the repositories are written against.

    Every method is a single store round trip. ``update`` is the only way to
    change an attribute in place; its ``increment`` argument maps to an atomic
    server-side add, never a read-modify-write.
    """

    @abstractmethod
    async def get(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        """Fetch one item by primary key, or None."""

    @abstractmethod
    async def put(
        self,
        table: str,
        item: dict[str, Any],
        conditions: Sequence[Filter] = (),
    ) -> None:
        """Write a whole item, optionally guarded by conditions."""

    @abstractmethod
    async def update(
        self,
        table: str,
        key: dict[str, Any],
        set_fields: dict[str, Any] | None = None,
        increment: dict[str, int] | None = None,
        conditions: Sequence[Filter] = (),
    ) -> dict[str, Any]:
        """
        Patch an item and return its new attributes.

        Args:
            table: Table name
            key: Primary key of the item
            set_fields: Attributes to overwrite
            increment: Attributes to atomically add to
            conditions: Checks evaluated against the stored item

        Raises:
            ConditionFailedError: If any condition does not hold
        """

    @abstractmethod
    async def delete(self, table: str, key: dict[str, Any]) -> None:
        """Delete an item; deleting a missing item is not an error."""

    @abstractmethod
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
        """Query a secondary index by partition key equality, then filter."""

    @abstractmethod
    async def scan(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        limit: int | None = None,
        start_key: dict[str, Any] | None = None,
    ) -> Page:
        """Scan a table, returning items matching every filter."""

    async def scan_all(
        self, table: str, filters: Sequence[Filter] = ()
    ) -> list[dict[str, Any]]:
        """Follow scan pagination until the table is exhausted."""
        items: list[dict[str, Any]] = []
        start_key = None
        while True:
            page = await self.scan(table, filters=filters, start_key=start_key)
            items.extend(page.items)
            if not page.last_evaluated_key:
                return items
            start_key = page.last_evaluated_key
