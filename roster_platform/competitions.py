from __future__ import annotations

from typing import Any, Dict, List


def list_memberships(conn: Any, user_id: int) -> List[Dict[str, Any]]:
    """Competitions the user belongs to, newest first."""
    rows = conn.execute(
        """
        SELECT c.id, c.name, c.type, c.status, c.owner_id, cm.role, cm.joined_at, c.created_at
        FROM competitions c
        JOIN competition_members cm ON cm.competition_id = c.id
        WHERE cm.user_id=?
        ORDER BY c.created_at DESC
        """,
        (int(user_id),),
    ).fetchall()

    return [
        {
            "id": r["id"],
            "name": r["name"],
            "type": r["type"],
            "status": r["status"],
            "isOwner": int(r["owner_id"]) == int(user_id),
            "role": r["role"],
            "joinedAt": r["joined_at"],
            "createdAt": r["created_at"],
        }
        for r in rows
    ]
