from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from roster_platform.auth.deps import get_store, require_auth
from roster_platform.db import Store
from roster_platform.matches.sharing import (
    ensure_match_share_link,
    resolve_shared_match,
    revoke_match_share_link,
)
from roster_platform.matches.store import (
    create_match,
    delete_match,
    get_match,
    list_match_summaries,
    update_match,
)
from roster_platform.models import Claims


router = APIRouter(prefix="/matches", tags=["matches"])


class CreateMatchRequest(BaseModel):
    id: Optional[str] = None
    data: Any = None


class UpdateMatchRequest(BaseModel):
    data: Any = None


@router.get("")
def matches_list(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_match_summaries(conn, claims.user_id)


@router.get("/shared/{share_id}")
def matches_shared(share_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Read-only match view for anyone holding the share id. No auth."""
    with store.read() as conn:
        return resolve_shared_match(conn, share_id)


@router.get("/{match_id}")
def matches_get(
    match_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.read() as conn:
        return get_match(conn, match_id, claims.user_id)


@router.post("", status_code=201)
def matches_create(
    payload: CreateMatchRequest,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        match_id = create_match(conn, match_id=payload.id or "", owner_id=claims.user_id, data=payload.data)
    return {"id": match_id}


@router.put("/{match_id}")
def matches_update(
    match_id: str,
    payload: UpdateMatchRequest,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        update_match(conn, match_id, claims.user_id, payload.data)
    return {"id": match_id}


@router.delete("/{match_id}")
def matches_delete(
    match_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        delete_match(conn, match_id, claims.user_id)
    return {"deleted": True}


@router.post("/{match_id}/share")
def matches_share(
    match_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        share_id = ensure_match_share_link(conn, match_id, claims.user_id)
    return {"shareId": share_id}


@router.delete("/{match_id}/share")
def matches_unshare(
    match_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        revoke_match_share_link(conn, match_id, claims.user_id)
    return {"ok": True}
