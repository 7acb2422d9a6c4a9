"""Share links for matches (see roster_platform.share_links)."""

from __future__ import annotations

import json
from typing import Any, Dict

from roster_platform.errors import NotFound
from roster_platform.share_links import clear_share_id, ensure_share_id


def ensure_match_share_link(conn: Any, match_id: str, owner_id: int) -> str:
    return ensure_share_id(conn, "matches", match_id, owner_id, not_found="match_not_found")


def revoke_match_share_link(conn: Any, match_id: str, owner_id: int) -> None:
    clear_share_id(conn, "matches", match_id, owner_id, not_found="match_not_found")


def resolve_shared_match(conn: Any, share_id: str) -> Dict[str, Any]:
    """Public view of a shared match: id and document, never the owner."""
    if not share_id:
        raise NotFound("shared_match_not_found")
    row = conn.execute(
        "SELECT id, data, created_at FROM matches WHERE share_id=?",
        (share_id,),
    ).fetchone()
    if row is None:
        raise NotFound("shared_match_not_found")
    return {"id": row["id"], "data": json.loads(row["data"]), "createdAt": row["created_at"]}
