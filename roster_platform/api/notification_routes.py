from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from roster_platform.auth.deps import get_store, require_auth
from roster_platform.db import Store
from roster_platform.models import Claims
from roster_platform.notifications import (
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def notifications_list(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(30, ge=1),
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_notifications(conn, claims.user_id, unread_only=unread_only, limit=limit)


@router.get("/unread-count")
def notifications_unread_count(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.read() as conn:
        return {"count": unread_count(conn, claims.user_id)}


@router.post("/read-all")
def notifications_read_all(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        mark_all_read(conn, claims.user_id)
    return {"ok": True}


@router.post("/{notification_id}/read")
def notifications_read(
    notification_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        mark_read(conn, notification_id, claims.user_id)
    return {"ok": True}


@router.delete("/{notification_id}")
def notifications_delete(
    notification_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        delete_notification(conn, notification_id, claims.user_id)
    return {"deleted": True}
