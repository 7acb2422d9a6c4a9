"""Share links for rosters (see roster_platform.share_links)."""

from __future__ import annotations

import json
from typing import Any, Dict

from roster_platform.errors import NotFound
from roster_platform.share_links import clear_share_id, ensure_share_id


# Never includes user_id or share_id.
_PUBLIC_COLS = "id, name, team_id, team_name, data, created_at, updated_at"


def ensure_share_link(conn: Any, roster_id: str, owner_id: int) -> str:
    return ensure_share_id(conn, "rosters", roster_id, owner_id, not_found="roster_not_found")


def revoke_share_link(conn: Any, roster_id: str, owner_id: int) -> None:
    clear_share_id(conn, "rosters", roster_id, owner_id, not_found="roster_not_found")


def resolve_shared_roster(conn: Any, share_id: str) -> Dict[str, Any]:
    """Public view of a shared roster. No authentication or ownership check."""
    if not share_id:
        raise NotFound("shared_roster_not_found")
    row = conn.execute(
        f"SELECT {_PUBLIC_COLS} FROM rosters WHERE share_id=?",
        (share_id,),
    ).fetchone()
    if row is None:
        raise NotFound("shared_roster_not_found")
    d = dict(row)
    d["data"] = json.loads(d["data"])
    return d
