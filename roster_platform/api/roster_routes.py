from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from roster_platform.auth.deps import get_store, require_auth
from roster_platform.db import Store
from roster_platform.errors import InvalidInput
from roster_platform.models import Claims
from roster_platform.rosters.sharing import ensure_share_link, revoke_share_link
from roster_platform.rosters.store import (
    create_roster,
    delete_roster,
    get_roster,
    is_missing_document,
    list_rosters,
    update_roster,
)


router = APIRouter(prefix="/rosters", tags=["rosters"])


class CreateRosterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    team_id: Optional[str] = Field(default=None, alias="teamId")
    team_name: Optional[str] = Field(default=None, alias="teamName")
    data: Any = None


class UpdateRosterRequest(BaseModel):
    """Partial update: omitted (or null) fields are left unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    team_id: Optional[str] = Field(default=None, alias="teamId")
    team_name: Optional[str] = Field(default=None, alias="teamName")
    data: Any = None


@router.get("")
def rosters_list(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> List[Dict[str, Any]]:
    with store.read() as conn:
        return list_rosters(conn, claims.user_id)


@router.get("/{roster_id}")
def rosters_get(
    roster_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.read() as conn:
        return get_roster(conn, roster_id, claims.user_id)


@router.post("", status_code=201)
def rosters_create(
    payload: CreateRosterRequest,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    if (
        not payload.id
        or not payload.team_id
        or not payload.team_name
        or is_missing_document(payload.data)
    ):
        raise InvalidInput("missing_required_fields")

    with store.transaction() as conn:
        roster_id = create_roster(
            conn,
            roster_id=payload.id,
            owner_id=claims.user_id,
            name=payload.name,
            team_id=payload.team_id,
            team_name=payload.team_name,
            data=payload.data,
        )
    return {"id": roster_id}


@router.put("/{roster_id}")
def rosters_update(
    roster_id: str,
    payload: UpdateRosterRequest,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        update_roster(
            conn,
            roster_id,
            claims.user_id,
            name=payload.name,
            team_id=payload.team_id,
            team_name=payload.team_name,
            data=payload.data,
        )
    return {"id": roster_id, "updated": True}


@router.delete("/{roster_id}")
def rosters_delete(
    roster_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        delete_roster(conn, roster_id, claims.user_id)
    return {"deleted": True}


@router.post("/{roster_id}/share")
def rosters_share(
    roster_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        share_id = ensure_share_link(conn, roster_id, claims.user_id)
    return {"shareId": share_id}


@router.delete("/{roster_id}/share")
def rosters_unshare(
    roster_id: str,
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        revoke_share_link(conn, roster_id, claims.user_id)
    return {"unshared": True}
