"""Authentication / authorization helpers.

Auth is intentionally lightweight:

- Users table (email/password hash + admin flag)
- Stateless JWT access tokens with a fixed 7-day lifetime

Only `Authorization: Bearer <token>` is accepted. Authorization decisions
use the token claims (user id for ownership, admin flag for catalog writes).
"""

from .crud import bootstrap_admin_if_needed, create_user
from .deps import get_store, require_admin, require_auth

__all__ = [
    "require_auth",
    "require_admin",
    "get_store",
    "bootstrap_admin_if_needed",
    "create_user",
]
