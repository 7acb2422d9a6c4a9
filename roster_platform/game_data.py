"""Game data catalog: a handful of admin-maintained JSON blobs.

Anyone may read; only admins may write (enforced by the API dependency).
"""

from __future__ import annotations

import json
from typing import Any, Dict

from roster_platform.errors import InvalidInput, NotFound
from roster_platform.util.time import utcnow_iso


VALID_KEYS = ("players", "teams", "skills", "starPlayers")


def _check_key(key: str) -> None:
    if key not in VALID_KEYS:
        raise InvalidInput("invalid_game_data_key")


def get_game_data(conn: Any, key: str) -> Dict[str, Any]:
    _check_key(key)
    row = conn.execute(
        "SELECT data, updated_at FROM game_data WHERE key=?",
        (key,),
    ).fetchone()
    if row is None:
        raise NotFound("game_data_not_seeded")
    return {"key": key, "data": json.loads(row["data"]), "updatedAt": row["updated_at"]}


def put_game_data(conn: Any, key: str, data: Any) -> None:
    _check_key(key)
    if data is None:
        raise InvalidInput("missing_data")
    now = utcnow_iso()
    conn.execute(
        """
        INSERT INTO game_data (key, data, updated_at) VALUES (?, ?, ?)
        ON CONFLICT(key) DO UPDATE SET data=excluded.data, updated_at=excluded.updated_at
        """,
        (key, json.dumps(data), now),
    )
