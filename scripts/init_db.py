"""Create tables and apply migrations.

Usage:
  python scripts/init_db.py [--dsn ./roster_platform.sqlite | postgresql://...]

Safe to run repeatedly. Without --dsn the configured DB_DSN is used.
"""

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from roster_platform.config import load_config
from roster_platform.db import Store, init_db


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--dsn", default=None)
    args = ap.parse_args()

    dsn = args.dsn or load_config().DB_DSN
    with Store(dsn) as store:
        init_db(store)
        with store.transaction() as conn:
            n = conn.execute("SELECT COUNT(*) AS n FROM users").fetchone()["n"]

    print(f"DB initialized ({store.dialect}): {dsn} users={int(n)}")


if __name__ == "__main__":
    main()
