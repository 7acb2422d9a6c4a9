from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Claims:
    """Identity facts carried by a session token."""

    user_id: int
    email: str
    is_admin: bool = False
