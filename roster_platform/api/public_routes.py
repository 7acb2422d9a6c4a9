from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from roster_platform.auth.deps import get_store, require_admin
from roster_platform.db import Store
from roster_platform.game_data import get_game_data, put_game_data
from roster_platform.models import Claims
from roster_platform.rosters.sharing import resolve_shared_roster


router = APIRouter(tags=["public"])


class GameDataRequest(BaseModel):
    data: Any = None


@router.get("/shared/{share_id}")
def shared_roster(share_id: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    """Read-only roster view for anyone holding the share id. No auth."""
    with store.read() as conn:
        return resolve_shared_roster(conn, share_id)


@router.get("/game-data/{key}")
def game_data_get(key: str, store: Store = Depends(get_store)) -> Dict[str, Any]:
    with store.read() as conn:
        return get_game_data(conn, key)


@router.put("/game-data/{key}")
def game_data_put(
    key: str,
    payload: GameDataRequest,
    _admin: Claims = Depends(require_admin),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.transaction() as conn:
        put_game_data(conn, key, payload.data)
    return {"key": key, "updated": True}
