from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt
from passlib.context import CryptContext

from roster_platform.models import Claims


_pwd = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
_JWT_ALG = "HS256"

# Fixed session lifetime; there is no refresh, callers log in again.
TOKEN_LIFETIME = timedelta(days=7)


class InvalidToken(Exception):
    """Token is malformed, tampered with, expired or missing claims."""

    def __init__(self, reason: str = "token_invalid"):
        self.reason = reason
        super().__init__(reason)


def configure_password_hashing(rounds: int) -> None:
    """Set the pbkdf2_sha256 work factor used for new hashes.

    Existing hashes keep verifying: the round count is stored inside each hash.
    """
    _pwd.update(pbkdf2_sha256__default_rounds=max(1, int(rounds)))


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("password_blank")
    return _pwd.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return _pwd.verify(password, password_hash)
    except ValueError:
        # Unknown or malformed hash format.
        return False


def create_access_token(
    *,
    secret: str,
    claims: Claims,
    issued_at: datetime | None = None,
) -> str:
    if not secret:
        raise ValueError("jwt_secret_blank")

    now = issued_at or datetime.now(timezone.utc)
    exp = now + TOKEN_LIFETIME

    payload: Dict[str, Any] = {
        "sub": str(claims.user_id),
        "userId": int(claims.user_id),
        "email": claims.email,
        "isAdmin": bool(claims.is_admin),
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def decode_access_token(*, token: str, secret: str) -> Claims:
    if not token:
        raise InvalidToken("missing_token")
    if not secret:
        raise ValueError("jwt_secret_blank")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[_JWT_ALG],
            options={"require": ["exp", "sub"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise InvalidToken("token_expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidToken("token_invalid") from e

    user_id = payload.get("userId")
    email = payload.get("email")
    is_admin = payload.get("isAdmin", False)
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        raise InvalidToken("token_claims_invalid")
    if not isinstance(email, str) or not email:
        raise InvalidToken("token_claims_invalid")
    if not isinstance(is_admin, bool):
        raise InvalidToken("token_claims_invalid")
    if payload.get("sub") != str(user_id):
        raise InvalidToken("token_claims_invalid")

    return Claims(user_id=user_id, email=email, is_admin=is_admin)
