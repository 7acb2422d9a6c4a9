"""Set a user's plan (the trusted path for entitlement changes).

Usage:
  python scripts/set_plan.py --email alice@example.com --plan premium --until 2027-01-01T00:00:00Z
  python scripts/set_plan.py --email alice@example.com --plan premium          # indefinite
  python scripts/set_plan.py --email alice@example.com --plan free

Users cannot change plan/plan_until through the API; billing integrations and
operators go through update_user_plan().
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from roster_platform.auth.crud import get_user_by_email, profile_view, update_user_plan
from roster_platform.billing import PLANS
from roster_platform.config import load_config
from roster_platform.db import Store, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--plan", choices=list(PLANS), required=True)
    ap.add_argument("--until", default=None, help="ISO-8601 UTC expiry; omit for indefinite")
    ap.add_argument("--stripe-customer-id", default=None)
    ap.add_argument("--stripe-subscription-id", default=None)
    args = ap.parse_args()

    cfg = load_config()
    with Store(cfg.DB_DSN) as store:
        init_db(store)
        with store.transaction() as conn:
            row = get_user_by_email(conn, args.email)
            if row is None:
                raise SystemExit(f"No user with email {args.email!r}")
            update_user_plan(
                conn,
                user_id=int(row["user_id"]),
                plan=args.plan,
                plan_until=args.until if args.plan == "premium" else None,
                stripe_customer_id=args.stripe_customer_id,
                stripe_subscription_id=args.stripe_subscription_id,
            )
            updated = get_user_by_email(conn, args.email)

    print("Updated plan:")
    print(profile_view(updated))


if __name__ == "__main__":
    main()
