from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends

from roster_platform.auth.crud import get_user_by_id, normalize_display_name, profile_view, update_display_name
from roster_platform.auth.deps import get_store, require_auth
from roster_platform.competitions import list_memberships
from roster_platform.db import Store
from roster_platform.errors import InvalidInput, NotFound
from roster_platform.matches.store import RECENT_SUMMARY_LIMIT, list_match_summaries
from roster_platform.models import Claims
from roster_platform.rosters.store import list_rosters


router = APIRouter(prefix="/me", tags=["me"])

# Plan, email and billing fields are written by trusted server-side processes only.
_WRITABLE_PROFILE_FIELDS = ("displayName",)


@router.get("")
def get_profile(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.read() as conn:
        row = get_user_by_id(conn, claims.user_id)
    if row is None:
        raise NotFound("user_not_found")
    return profile_view(row)


@router.patch("")
def update_profile(
    payload: Dict[str, Any] = Body(...),
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    extra = sorted(k for k in payload if k not in _WRITABLE_PROFILE_FIELDS)
    if extra:
        raise InvalidInput("field_not_writable")
    if "displayName" not in payload:
        raise InvalidInput("nothing_to_update")

    # Validate before touching the store.
    normalized = normalize_display_name(payload["displayName"])

    with store.transaction() as conn:
        normalized = update_display_name(conn, claims.user_id, normalized)

    return {"updated": True, "displayName": normalized}


@router.get("/rosters")
def my_rosters(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_rosters(conn, claims.user_id)


@router.get("/matches")
def my_matches(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_match_summaries(conn, claims.user_id, limit=RECENT_SUMMARY_LIMIT)


@router.get("/competitions")
def my_competitions(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_memberships(conn, claims.user_id)
