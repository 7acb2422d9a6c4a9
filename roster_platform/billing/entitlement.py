from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from roster_platform.util.time import parse_iso_instant


PLANS = ("free", "premium")


def _warn(msg: str) -> None:
    print(f"[entitlement] WARNING {msg}")


def is_premium_active(plan: Any, plan_until: Any, *, now: datetime | None = None) -> bool:
    """Return whether a user currently has premium.

    plan_until contract:
      - ISO-8601 UTC instant, e.g. "2026-03-14T00:00:00.000Z"
      - None means premium indefinitely (lifetime or manual grant)
      - an unparseable value is treated as "not premium" and reported, never raised

    Expiry is exclusive: an instant equal to `now` counts as expired.
    """
    if plan != "premium":
        return False

    if plan_until is None or plan_until == "":
        return True

    try:
        expiry = parse_iso_instant(str(plan_until))
    except ValueError:
        _warn(f"invalid plan_until value {plan_until!r}; treating as not premium")
        return False

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    return expiry > current
