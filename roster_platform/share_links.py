"""Public read-only share links, shared by rosters and matches.

A share id is 8 random bytes, base64url-encoded without padding (11 chars),
kept in a UNIQUE `share_id` column of the owning table. A collision is not
retried, it surfaces as a Conflict. Revoking sets the column to NULL and does
not remember the old value: a later issue always draws a fresh id, and the
old link simply stops resolving.
"""

from __future__ import annotations

import secrets
from typing import Any

from roster_platform.errors import Conflict, NotFound
from roster_platform.util.time import utcnow_iso_precise


SHARE_ID_BYTES = 8

# Table names are interpolated into SQL; only these are accepted.
SHAREABLE_TABLES = ("rosters", "matches")


def new_share_id() -> str:
    return secrets.token_urlsafe(SHARE_ID_BYTES)


def _check_table(table: str) -> None:
    if table not in SHAREABLE_TABLES:
        raise ValueError(f"not_shareable: {table}")


def _current_share_id(conn: Any, table: str, row_id: str, owner_id: int, not_found: str) -> str | None:
    row = conn.execute(
        f"SELECT share_id FROM {table} WHERE id=? AND user_id=?",
        (row_id, int(owner_id)),
    ).fetchone()
    if row is None:
        raise NotFound(not_found)
    return row["share_id"]


def ensure_share_id(conn: Any, table: str, row_id: str, owner_id: int, *, not_found: str) -> str:
    """Return the row's share id, issuing one if it has none (idempotent)."""
    _check_table(table)
    existing = _current_share_id(conn, table, row_id, owner_id, not_found)
    if existing:
        return str(existing)

    share_id = new_share_id()
    try:
        # `share_id IS NULL` keeps a concurrent issuer's value if it won the race.
        conn.execute(
            f"""
            UPDATE {table} SET share_id=?, updated_at=?
            WHERE id=? AND user_id=? AND share_id IS NULL
            """,
            (share_id, utcnow_iso_precise(), row_id, int(owner_id)),
        )
    except conn.IntegrityError as e:
        raise Conflict("share_id_collision") from e

    current = _current_share_id(conn, table, row_id, owner_id, not_found)
    assert current is not None
    return str(current)


def clear_share_id(conn: Any, table: str, row_id: str, owner_id: int, *, not_found: str) -> None:
    _check_table(table)
    cur = conn.execute(
        f"UPDATE {table} SET share_id=NULL, updated_at=? WHERE id=? AND user_id=?",
        (utcnow_iso_precise(), row_id, int(owner_id)),
    )
    if cur.rowcount == 0:
        raise NotFound(not_found)
