"""Timestamp helpers; every component takes ``now`` from an injected clock."""

from datetime import UTC, datetime

SECONDS_PER_DAY = 24 * 60 * 60


def iso_timestamp(now: float) -> str:
    """Format epoch seconds as a fixed-width ISO 8601 UTC string (sortable)."""
    return datetime.fromtimestamp(now, UTC).isoformat(timespec="microseconds")


def days_from(now: float, days: int) -> int:
    """Epoch seconds ``days`` days after ``now``."""
    return int(now) + days * SECONDS_PER_DAY
