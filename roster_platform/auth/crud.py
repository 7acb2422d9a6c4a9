from __future__ import annotations

import re
from typing import Any, Dict, Optional

from roster_platform.billing.entitlement import PLANS, is_premium_active
from roster_platform.config import Config
from roster_platform.db import Store
from roster_platform.errors import Conflict, InvalidInput, NotFound
from roster_platform.util.time import parse_iso_instant, utcnow_iso

from .security import hash_password, verify_password


MIN_PASSWORD_LENGTH = 6
DISPLAY_NAME_MIN = 2
DISPLAY_NAME_MAX = 50
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    """Account summary returned by the auth endpoints."""
    d = dict(row)
    return {
        "id": int(d["user_id"]),
        "email": d["email"],
        "isAdmin": bool(d.get("is_admin")),
        "createdAt": d.get("created_at"),
    }


def profile_view(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    """Full profile of the caller, including the computed premium flag."""
    d = dict(row)
    plan = d.get("plan") or "free"
    return {
        "id": int(d["user_id"]),
        "email": d["email"],
        "displayName": d.get("display_name") or "",
        "isAdmin": bool(d.get("is_admin")),
        "plan": plan,
        "planUntil": d.get("plan_until"),
        "isPremium": is_premium_active(plan, d.get("plan_until")),
        "hasStripe": bool(d.get("stripe_customer_id")),
        "createdAt": d.get("created_at"),
    }


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    # Emails are matched exactly as stored (case-sensitive).
    if not email:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE email=?",
        (email,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: int) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM users WHERE user_id=?",
        (int(user_id),),
    ).fetchone()


def credentials_match(row: Optional[Any], password: str) -> bool:
    """Check a password against a fetched user row.

    Runs pbkdf2, so call it after the store handle is released.
    """
    if row is None:
        return False
    return verify_password(password, str(row["password_hash"]))


def hash_new_password(password: str) -> str:
    """Validate a new password and return its hash (slow; not under a lock)."""
    if not password:
        raise InvalidInput("email_and_password_required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidInput("password_too_short")
    return hash_password(password)


def create_user(
    conn: Any,
    *,
    email: str,
    password_hash: str,
    is_admin: bool = False,
) -> Dict[str, Any]:
    """Insert a user; `password_hash` comes from hash_new_password()."""
    if not email or not password_hash:
        raise InvalidInput("email_and_password_required")

    existing = conn.execute("SELECT 1 FROM users WHERE email=?", (email,)).fetchone()
    if existing is not None:
        raise Conflict("email_exists")

    now = utcnow_iso()
    try:
        conn.execute(
            """
            INSERT INTO users (email, password_hash, is_admin, plan, created_at, updated_at)
            VALUES (?,?,?,?,?,?)
            """,
            (email, password_hash, 1 if is_admin else 0, "free", now, now),
        )
    except conn.IntegrityError as e:
        # Lost a race with a concurrent registration.
        raise Conflict("email_exists") from e

    row = get_user_by_email(conn, email)
    assert row is not None
    return public_user(row)


def touch_last_login(conn: Any, user_id: int) -> None:
    now = utcnow_iso()
    conn.execute(
        "UPDATE users SET last_login_at=?, updated_at=? WHERE user_id=?",
        (now, now, int(user_id)),
    )


def normalize_display_name(value: Any) -> str:
    """Validate a display name; returns the trimmed value or raises InvalidInput."""
    if not isinstance(value, str):
        raise InvalidInput("display_name_not_string")
    normalized = value.strip()
    if len(normalized) < DISPLAY_NAME_MIN or len(normalized) > DISPLAY_NAME_MAX:
        raise InvalidInput("display_name_length")
    if _CONTROL_CHARS_RE.search(normalized):
        raise InvalidInput("display_name_control_chars")
    return normalized


def update_display_name(conn: Any, user_id: int, display_name: Any) -> str:
    """The only profile field a user may change about themselves."""
    normalized = normalize_display_name(display_name)
    cur = conn.execute(
        "UPDATE users SET display_name=?, updated_at=? WHERE user_id=?",
        (normalized, utcnow_iso(), int(user_id)),
    )
    if cur.rowcount == 0:
        raise NotFound("user_not_found")
    return normalized


def update_user_plan(
    conn: Any,
    *,
    user_id: int,
    plan: str,
    plan_until: str | None = None,
    stripe_customer_id: str | None = None,
    stripe_subscription_id: str | None = None,
) -> None:
    """Persist entitlement state onto the user row.

    Trusted server-side path only (operator scripts); never reachable from the
    profile endpoints. `plan_until` must be an ISO-8601 UTC instant or None
    (indefinite).
    """
    if plan not in PLANS:
        raise InvalidInput("invalid_plan")
    if plan_until is not None:
        try:
            parse_iso_instant(plan_until)
        except ValueError as e:
            raise InvalidInput("invalid_plan_until") from e

    fields: list[tuple[str, Any]] = [("plan", plan), ("plan_until", plan_until)]
    if stripe_customer_id is not None:
        fields.append(("stripe_customer_id", stripe_customer_id))
    if stripe_subscription_id is not None:
        fields.append(("stripe_subscription_id", stripe_subscription_id))
    fields.append(("updated_at", utcnow_iso()))

    sets = ", ".join([f"{k}=?" for k, _ in fields])
    params = [v for _, v in fields] + [int(user_id)]
    cur = conn.execute(f"UPDATE users SET {sets} WHERE user_id=?", params)
    if cur.rowcount == 0:
        raise NotFound("user_not_found")


def bootstrap_admin_if_needed(cfg: Config, store: Store) -> Optional[Dict[str, Any]]:
    """Create the first admin user if the users table is empty.

    Controlled via environment variables:

    - AUTH_BOOTSTRAP_ADMIN_EMAIL
    - AUTH_BOOTSTRAP_ADMIN_PASSWORD

    Nothing happens unless both are set and there are 0 rows in `users`.
    """

    email = (cfg.AUTH_BOOTSTRAP_ADMIN_EMAIL or "").strip()
    password = cfg.AUTH_BOOTSTRAP_ADMIN_PASSWORD or ""
    if not email or not password:
        return None

    with store.read() as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
    if int(n) > 0:
        return None

    password_hash = hash_new_password(password)
    with store.transaction() as conn:
        n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]
        if int(n) > 0:
            return None
        return create_user(conn, email=email, password_hash=password_hash, is_admin=True)
