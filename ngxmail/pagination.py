"""Opaque cursors and page-size limits for list endpoints."""

from __future__ import annotations

import base64
import binascii

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
_SEPARATOR = "|"


class InvalidCursorError(ValueError):
    """Raised when a cursor is not valid base64."""


def encode_cursor(*args: str) -> str:
    """Join the parts with '|' and base64-encode the result."""
    raw = _SEPARATOR.join(args)
    return base64.b64encode(raw.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> list[str]:
    """Decode a cursor into its parts; an empty cursor yields an empty list."""
    if not cursor:
        return []
    try:
        raw = base64.b64decode(cursor.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise InvalidCursorError(f"invalid cursor: {exc}") from exc
    return raw.decode("utf-8", errors="replace").split(_SEPARATOR)


def clamp_limit(limit: int) -> int:
    """Clamp limit to [1, MAX_LIMIT], using DEFAULT_LIMIT when limit <= 0."""
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)