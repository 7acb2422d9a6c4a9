from __future__ import annotations

from datetime import datetime, timezone


def utcnow_iso() -> str:
    """Current UTC time as ISO-8601 string with Z."""
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def utcnow_iso_precise() -> str:
    """Like utcnow_iso(), keeping microseconds.

    Used for updated_at columns that are sorted on, so two writes in the same
    second still order correctly (fixed width keeps lexicographic order).
    """
    return datetime.now(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def parse_iso_instant(value: str) -> datetime:
    """Parse an ISO-8601 instant into an aware UTC datetime.

    Accepts a trailing 'Z' and fractional seconds. Naive values are read as UTC.
    Raises ValueError when the string is not a valid instant.
    """
    s = (value or "").strip()
    if not s:
        raise ValueError("empty_timestamp")
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
