from __future__ import annotations

import secrets
from typing import Any, Dict, List

from roster_platform.errors import InvalidInput, NotFound
from roster_platform.util.time import utcnow_iso_precise


MAX_LIST_LIMIT = 100


def _to_api(r: Any) -> Dict[str, Any]:
    return {
        "id": r["id"],
        "type": r["type"],
        "title": r["title"],
        "body": r["body"],
        "entityType": r["entity_type"],
        "entityId": r["entity_id"],
        "isRead": bool(r["is_read"]),
        "createdAt": r["created_at"],
    }


def create_notification(
    conn: Any,
    *,
    user_id: int,
    notification_type: str,
    title: str,
    body: str = "",
    entity_type: str | None = None,
    entity_id: str | None = None,
) -> str:
    if not notification_type or not title:
        raise InvalidInput("missing_type_or_title")
    notification_id = secrets.token_urlsafe(8)
    conn.execute(
        """
        INSERT INTO notifications (id, user_id, type, title, body, entity_type, entity_id, is_read, created_at)
        VALUES (?,?,?,?,?,?,?,0,?)
        """,
        (
            notification_id,
            int(user_id),
            notification_type,
            title,
            body or "",
            entity_type or None,
            entity_id or None,
            utcnow_iso_precise(),
        ),
    )
    return notification_id


def list_notifications(conn: Any, user_id: int, *, unread_only: bool = False, limit: int = 30) -> List[Dict[str, Any]]:
    limit = max(1, min(int(limit), MAX_LIST_LIMIT))
    sql = """
        SELECT id, type, title, body, entity_type, entity_id, is_read, created_at
        FROM notifications
        WHERE user_id=?
    """
    if unread_only:
        sql += " AND is_read=0"
    sql += " ORDER BY created_at DESC LIMIT ?"
    rows = conn.execute(sql, (int(user_id), limit)).fetchall()
    return [_to_api(r) for r in rows]


def unread_count(conn: Any, user_id: int) -> int:
    row = conn.execute(
        "SELECT COUNT(*) AS c FROM notifications WHERE user_id=? AND is_read=0",
        (int(user_id),),
    ).fetchone()
    return int(row["c"])


def mark_read(conn: Any, notification_id: str, user_id: int) -> None:
    cur = conn.execute(
        "UPDATE notifications SET is_read=1 WHERE id=? AND user_id=?",
        (notification_id, int(user_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("notification_not_found")


def mark_all_read(conn: Any, user_id: int) -> int:
    cur = conn.execute(
        "UPDATE notifications SET is_read=1 WHERE user_id=? AND is_read=0",
        (int(user_id),),
    )
    return cur.rowcount


def delete_notification(conn: Any, notification_id: str, user_id: int) -> None:
    cur = conn.execute(
        "DELETE FROM notifications WHERE id=? AND user_id=?",
        (notification_id, int(user_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("notification_not_found")
