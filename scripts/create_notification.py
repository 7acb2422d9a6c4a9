"""Create a notification for a user (manual testing / announcements).

Usage:
  python scripts/create_notification.py --email alice@example.com --type announcement \
      --title "Season 3" --body "New star players are available"
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from roster_platform.auth.crud import get_user_by_email
from roster_platform.config import load_config
from roster_platform.db import Store, init_db
from roster_platform.notifications import create_notification


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--type", dest="notification_type", default="announcement")
    ap.add_argument("--title", required=True)
    ap.add_argument("--body", default="")
    ap.add_argument("--entity-type", default=None)
    ap.add_argument("--entity-id", default=None)
    args = ap.parse_args()

    cfg = load_config()
    with Store(cfg.DB_DSN) as store:
        init_db(store)
        with store.transaction() as conn:
            row = get_user_by_email(conn, args.email)
            if row is None:
                raise SystemExit(f"No user with email {args.email!r}")
            notification_id = create_notification(
                conn,
                user_id=int(row["user_id"]),
                notification_type=args.notification_type,
                title=args.title,
                body=args.body,
                entity_type=args.entity_type,
                entity_id=args.entity_id,
            )

    print(f"Created notification {notification_id}")


if __name__ == "__main__":
    main()
