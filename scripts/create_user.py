"""Create a user in the DB.

Usage:
  python scripts/create_user.py --email alice@example.com --password '...' [--admin]

Admin accounts can only be created this way (or via the bootstrap env vars).
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from roster_platform.auth.crud import create_user, hash_new_password
from roster_platform.auth.security import configure_password_hashing
from roster_platform.config import load_config
from roster_platform.db import Store, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--email", required=True)
    ap.add_argument("--password", required=True)
    ap.add_argument("--admin", action="store_true")
    args = ap.parse_args()

    cfg = load_config()
    configure_password_hashing(cfg.AUTH_PASSWORD_ROUNDS)

    password_hash = hash_new_password(args.password)

    with Store(cfg.DB_DSN) as store:
        init_db(store)
        with store.transaction() as conn:
            u = create_user(conn, email=args.email, password_hash=password_hash, is_admin=args.admin)

    print("Created user:")
    print(u)


if __name__ == "__main__":
    main()
