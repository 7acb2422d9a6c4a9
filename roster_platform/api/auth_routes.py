from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from roster_platform.auth.crud import (
    create_user,
    credentials_match,
    get_user_by_email,
    get_user_by_id,
    hash_new_password,
    public_user,
    touch_last_login,
)
from roster_platform.auth.deps import get_store, require_auth
from roster_platform.auth.security import create_access_token
from roster_platform.db import Store
from roster_platform.errors import InvalidInput, NotFound, Unauthorized
from roster_platform.models import Claims


router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Public self-serve registration. Emails are stored exactly as given."""

    email: Optional[str] = None
    password: Optional[str] = None


def _token_response(request: Request, user: Dict[str, Any]) -> Dict[str, Any]:
    claims = Claims(user_id=int(user["id"]), email=str(user["email"]), is_admin=bool(user["isAdmin"]))
    token = create_access_token(secret=request.app.state.jwt_secret, claims=claims)
    return {"token": token, "token_type": "bearer", "user": user}


@router.post("/register", status_code=201)
def auth_register(
    payload: RegisterRequest,
    request: Request,
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    email = payload.email or ""
    if not email:
        raise InvalidInput("email_and_password_required")
    password_hash = hash_new_password(payload.password or "")

    with store.transaction() as conn:
        u = create_user(conn, email=email, password_hash=password_hash)

    return _token_response(request, u)


@router.post("/login")
def auth_login(
    payload: LoginRequest,
    request: Request,
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    if not payload.email or not payload.password:
        raise InvalidInput("email_and_password_required")

    with store.read() as conn:
        user_row = get_user_by_email(conn, payload.email)
    if not credentials_match(user_row, payload.password):
        raise Unauthorized("invalid_credentials")

    with store.transaction() as conn:
        touch_last_login(conn, int(user_row["user_id"]))
    u = public_user(user_row)

    return _token_response(request, u)


@router.get("/me")
def auth_me(
    claims: Claims = Depends(require_auth),
    store: Store = Depends(get_store),
) -> Dict[str, Any]:
    with store.read() as conn:
        row = get_user_by_id(conn, claims.user_id)
    if row is None:
        raise NotFound("user_not_found")
    return public_user(row)
