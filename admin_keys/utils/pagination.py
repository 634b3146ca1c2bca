"""Opaque pagination cursors wrapping the store's native last-evaluated key."""

import base64
import binascii
import json
from typing import Any

from admin_keys.exceptions import ValidationError


def encode_cursor(last_evaluated_key: dict[str, Any] | None) -> str | None:
    """
    Encode a store cursor as URL-safe base64 JSON.

    Args:
        last_evaluated_key: Store cursor, or None on the last page

    Returns:
        Opaque cursor string, or None
    """
    if not last_evaluated_key:
        return None
    raw = json.dumps(last_evaluated_key, sort_keys=True, separators=(",", ":"))
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str | None) -> dict[str, Any] | None:
    """
    Decode a cursor produced by ``encode_cursor``.

    Args:
        cursor: Opaque cursor from a previous response

    Returns:
        Store cursor dict, or None when no cursor was given

    Raises:
        ValidationError: If the cursor is malformed
    """
    if not cursor:
        return None
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, ValueError, UnicodeError) as exc:
        raise ValidationError(
            message="Invalid pagination cursor",
            details={"cursor": "Cursor is not a value returned by this API"},
        ) from exc
    if not isinstance(decoded, dict):
        raise ValidationError(
            message="Invalid pagination cursor",
            details={"cursor": "Cursor is not a value returned by this API"},
        )
    return decoded
