from __future__ import annotations

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from roster_platform.db import Store
from roster_platform.errors import Forbidden, Unauthorized
from roster_platform.models import Claims

from .security import InvalidToken, decode_access_token


# auto_error=False: a missing header or a non-Bearer scheme yields None, so the
# 401 is raised here with our own detail code.
_bearer = HTTPBearer(auto_error=False)


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None or not store.is_open:
        raise RuntimeError("store_not_open")
    return store


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
) -> Claims:
    """Authenticate a request from its `Authorization: Bearer <jwt>` header.

    Returns the token's claims as an immutable value; handlers receive it as a
    parameter. Claims are trusted as issued: the admin flag is not re-read from
    the users table, so revoking admin takes effect when the token expires.
    """

    if credentials is None or not credentials.credentials:
        raise Unauthorized("missing_token")

    secret = getattr(request.app.state, "jwt_secret", None)
    if not secret:
        raise RuntimeError("jwt_secret_missing")

    try:
        return decode_access_token(token=credentials.credentials, secret=secret)
    except InvalidToken as e:
        raise Unauthorized(e.reason) from e


def require_admin(claims: Claims = Depends(require_auth)) -> Claims:
    if not claims.is_admin:
        raise Forbidden("admin_required")
    return claims
