from __future__ import annotations

import json
from typing import Any, Dict, List

from roster_platform.errors import Conflict, InvalidInput, NotFound
from roster_platform.util.time import utcnow_iso_precise


PLAYER_STAT_FIELDS = ("tds", "cas", "cp", "int", "def")
RECENT_SUMMARY_LIMIT = 50


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def validate_match_data(data: Any) -> None:
    """Structural checks on a match document; raises InvalidInput.

    - homeTeam and awayTeam present
    - homeScore / awayScore numeric
    - per-player stats are non-negative integers (0 or absent always allowed)
    - at most one MVP per team
    """
    if not isinstance(data, dict):
        raise InvalidInput("missing_data")
    if not data.get("homeTeam") or not data.get("awayTeam"):
        raise InvalidInput("missing_teams")
    if not _is_number(data.get("homeScore")) or not _is_number(data.get("awayScore")):
        raise InvalidInput("scores_not_numeric")

    for side in ("homeTeam", "awayTeam"):
        team = data[side]
        if not isinstance(team, dict):
            raise InvalidInput(f"invalid_{side}")
        mvp_count = 0
        for player in team.get("players") or []:
            if not isinstance(player, dict):
                raise InvalidInput(f"invalid_player_{side}")
            for field in PLAYER_STAT_FIELDS:
                v = player.get(field)
                if v is None or v == 0:
                    continue
                if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                    raise InvalidInput(f"invalid_{field}_{side}")
            if player.get("mvp"):
                mvp_count += 1
        if mvp_count > 1:
            raise InvalidInput(f"too_many_mvps_{side}")


def _summary(row: Any) -> Dict[str, Any]:
    d = json.loads(row["data"])
    home = d.get("homeTeam") or {}
    away = d.get("awayTeam") or {}
    return {
        "id": row["id"],
        "date": d.get("date"),
        "competition": d.get("competition"),
        "round": d.get("round"),
        "homeTeamName": home.get("name") or "",
        "awayTeamName": away.get("name") or "",
        "homeScore": d.get("homeScore") if d.get("homeScore") is not None else 0,
        "awayScore": d.get("awayScore") if d.get("awayScore") is not None else 0,
        "createdAt": row["created_at"],
    }


def list_match_summaries(conn: Any, owner_id: int, *, limit: int | None = None) -> List[Dict[str, Any]]:
    sql = "SELECT id, data, created_at FROM matches WHERE user_id=? ORDER BY created_at DESC"
    params: List[Any] = [int(owner_id)]
    if limit is not None:
        sql += " LIMIT ?"
        params.append(int(limit))
    rows = conn.execute(sql, tuple(params)).fetchall()
    return [_summary(r) for r in rows]


def get_match(conn: Any, match_id: str, owner_id: int) -> Dict[str, Any]:
    row = conn.execute(
        "SELECT id, data, share_id FROM matches WHERE id=? AND user_id=?",
        (match_id, int(owner_id)),
    ).fetchone()
    if row is None:
        raise NotFound("match_not_found")
    return {"id": row["id"], "data": json.loads(row["data"]), "shareId": row["share_id"]}


def create_match(conn: Any, *, match_id: str, owner_id: int, data: Any) -> str:
    if not match_id or data is None:
        raise InvalidInput("missing_required_fields")
    validate_match_data(data)

    now = utcnow_iso_precise()
    try:
        conn.execute(
            "INSERT INTO matches (id, user_id, data, created_at, updated_at) VALUES (?,?,?,?,?)",
            (match_id, int(owner_id), json.dumps(data), now, now),
        )
    except conn.IntegrityError as e:
        raise Conflict("match_exists") from e
    return match_id


def update_match(conn: Any, match_id: str, owner_id: int, data: Any) -> None:
    """Replace the match document."""
    if data is None:
        raise InvalidInput("missing_data")
    validate_match_data(data)

    cur = conn.execute(
        "UPDATE matches SET data=?, updated_at=? WHERE id=? AND user_id=?",
        (json.dumps(data), utcnow_iso_precise(), match_id, int(owner_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("match_not_found")


def delete_match(conn: Any, match_id: str, owner_id: int) -> None:
    cur = conn.execute(
        "DELETE FROM matches WHERE id=? AND user_id=?",
        (match_id, int(owner_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("match_not_found")
