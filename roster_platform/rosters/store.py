"""Ownership-scoped CRUD over roster documents.

Every statement filters on `user_id` in SQL. A roster that exists but belongs
to someone else is indistinguishable from a missing one (NotFound).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

from roster_platform.errors import Conflict, InvalidInput, NotFound
from roster_platform.util.time import utcnow_iso_precise


_SUMMARY_COLS = "id, name, team_id, team_name, share_id, created_at, updated_at"


def _blank(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def is_missing_document(data: Any) -> bool:
    """None, false, 0 and "" are not documents. Empty {} and [] are."""
    if isinstance(data, (dict, list)):
        return False
    return not data


def _roster_from_row(row: Any) -> Dict[str, Any]:
    d = dict(row)
    d.pop("user_id", None)
    d["data"] = json.loads(d["data"])
    return d


def list_rosters(conn: Any, owner_id: int) -> List[Dict[str, Any]]:
    rows = conn.execute(
        f"""
        SELECT {_SUMMARY_COLS}
        FROM rosters
        WHERE user_id=?
        ORDER BY updated_at DESC
        """,
        (int(owner_id),),
    ).fetchall()
    return [dict(r) for r in rows]


def get_roster(conn: Any, roster_id: str, owner_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT * FROM rosters WHERE id=? AND user_id=?",
        (roster_id, int(owner_id)),
    ).fetchone()
    if row is None:
        raise NotFound("roster_not_found")
    return _roster_from_row(row)


def create_roster(
    conn: Any,
    *,
    roster_id: str,
    owner_id: int,
    team_id: str,
    team_name: str,
    data: Any,
    name: str | None = None,
) -> str:
    if _blank(roster_id) or _blank(team_id) or _blank(team_name) or is_missing_document(data):
        raise InvalidInput("missing_required_fields")

    now = utcnow_iso_precise()
    try:
        conn.execute(
            """
            INSERT INTO rosters (id, user_id, name, team_id, team_name, data, created_at, updated_at)
            VALUES (?,?,?,?,?,?,?,?)
            """,
            (roster_id, int(owner_id), name or "", team_id, team_name, json.dumps(data), now, now),
        )
    except conn.IntegrityError as e:
        # ids are global: a clash with another user's roster is still a conflict.
        raise Conflict("roster_exists") from e
    return roster_id


def update_roster(
    conn: Any,
    roster_id: str,
    owner_id: int,
    *,
    name: str | None = None,
    team_id: str | None = None,
    team_name: str | None = None,
    data: Any = None,
) -> None:
    """Partial update: only the fields given (not None) change.

    updated_at is refreshed even when no field is given.
    """
    if team_id is not None and _blank(team_id):
        raise InvalidInput("team_id_blank")
    if team_name is not None and _blank(team_name):
        raise InvalidInput("team_name_blank")

    # Build dynamic SQL so we only touch provided fields.
    fields: list[tuple[str, Any]] = []
    if name is not None:
        fields.append(("name", name))
    if team_id is not None:
        fields.append(("team_id", team_id))
    if team_name is not None:
        fields.append(("team_name", team_name))
    if data is not None:
        fields.append(("data", json.dumps(data)))
    fields.append(("updated_at", utcnow_iso_precise()))

    sets = ", ".join([f"{k}=?" for k, _ in fields])
    params = [v for _, v in fields] + [roster_id, int(owner_id)]
    cur = conn.execute(f"UPDATE rosters SET {sets} WHERE id=? AND user_id=?", params)
    if cur.rowcount == 0:
        raise NotFound("roster_not_found")


def delete_roster(conn: Any, roster_id: str, owner_id: int) -> None:
    cur = conn.execute(
        "DELETE FROM rosters WHERE id=? AND user_id=?",
        (roster_id, int(owner_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("roster_not_found")
