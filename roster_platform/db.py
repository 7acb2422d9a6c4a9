from __future__ import annotations

import re
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, Sequence
from urllib.parse import urlparse

from roster_platform.schema import get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except ValueError:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    # Allow sqlite:///path style, but default is file path.
    return "sqlite"


# Quoted literals/identifiers are matched first so a '?' inside them is kept.
_PLACEHOLDER_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\?")


def _qmark_to_pct(sql: str) -> str:
    """Rewrite sqlite qmark placeholders (?) as psycopg2 ones (%s).

    A '?' inside a single-quoted string or a double-quoted identifier is left
    alone. Not a SQL parser: comments are not recognized.
    """
    return _PLACEHOLDER_RE.sub(lambda m: "%s" if m.group(0) == "?" else m.group(0), sql)


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()

    def fetchall(self) -> Any:
        return self._cur.fetchall()

    @property
    def rowcount(self) -> int:
        return int(self._cur.rowcount or 0)

    def close(self) -> None:
        self._cur.close()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cur, name)


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    @property
    def IntegrityError(self) -> type:
        return self._conn.IntegrityError

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        wrapper = PGCursor(self._conn.cursor())
        wrapper.execute(sql, params)
        return wrapper

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


class Store:
    """Process-wide handle on the persistent store.

    Opened once at startup and closed at shutdown:

        with Store(cfg.DB_DSN) as store:
            with store.transaction() as conn:   # writes
                ...
            with store.read() as conn:          # reads
                ...

    Writes go through one writer connection. A re-entrant lock serializes
    them, so each `transaction()` block is atomic: commit on success,
    rollback on any exception.

    Reads never take that lock. Each worker thread gets its own connection,
    and SQLite in WAL mode lets it read the last committed state while a write
    is in progress. An in-memory SQLite database only exists on one
    connection, so there reads share the writer connection and its lock.
    """

    def __init__(self, db_dsn: str):
        self.dsn = (db_dsn or "").strip()
        self.dialect = _detect_dialect(self.dsn)
        self._conn: Optional[Any] = None
        self._lock = threading.RLock()
        self._local = threading.local()
        self._readers: List[Any] = []
        self._readers_lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def _in_memory(self) -> bool:
        return self.dialect == "sqlite" and self._sqlite_path() == ":memory:"

    def open(self) -> "Store":
        if self._conn is not None:
            return self
        self._conn = self._connect()
        self._local = threading.local()
        _debug(f"Opened {self.dialect} store")
        return self

    def _connect(self, *, writer: bool = True) -> Any:
        if self.dialect == "postgres":
            return self._open_postgres()
        return self._open_sqlite(writer=writer)

    def _open_postgres(self) -> Any:
        try:
            import psycopg2
            import psycopg2.extras
        except ImportError as e:
            raise RuntimeError(
                "Postgres selected but psycopg2 is not installed. "
                "Install the 'postgres' extra (psycopg2-binary) and try again."
            ) from e

        # RealDictCursor makes fetchone()/fetchall() rows act like dicts.
        raw = psycopg2.connect(self.dsn, cursor_factory=psycopg2.extras.RealDictCursor)
        return PGConnection(raw)

    def _sqlite_path(self) -> str:
        path = self.dsn or "./roster_platform.sqlite"
        # Support sqlite:///path style
        if path.lower().startswith("sqlite:///"):
            path = path[len("sqlite:///") :]
        return path

    def _open_sqlite(self, *, writer: bool = True) -> sqlite3.Connection:
        path = self._sqlite_path()
        if path != ":memory:":
            Path(path).parent.mkdir(parents=True, exist_ok=True)
        # check_same_thread=False: close() may run on another thread.
        conn = sqlite3.connect(path, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        if writer:
            # Concurrent readers, single writer. WAL mode persists in the file.
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def close(self) -> None:
        with self._readers_lock:
            readers, self._readers = self._readers, []
        for conn in readers:
            conn.close()
        self._local = threading.local()

        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        _debug(f"Closed {self.dialect} store")

    def __enter__(self) -> "Store":
        return self.open()

    def __exit__(self, *exc: Any) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        with self._lock:
            if self._conn is None:
                raise RuntimeError("store_not_open")
            conn = self._conn
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise

    def _reader(self) -> Any:
        conn = getattr(self._local, "conn", None)
        if conn is None:
            conn = self._connect(writer=False)
            self._local.conn = conn
            with self._readers_lock:
                self._readers.append(conn)
        return conn

    @contextmanager
    def read(self) -> Iterator[Any]:
        """Read-only unit of work. Sees committed data only; never commits."""
        if self._conn is None:
            raise RuntimeError("store_not_open")
        if self._in_memory:
            with self.transaction() as conn:
                yield conn
            return

        conn = self._reader()
        try:
            yield conn
        finally:
            # Ends the snapshot (and any stray write) before the next read.
            conn.rollback()


def init_db(store: Store) -> None:
    """Create all tables and run lightweight migrations."""
    dialect = store.dialect
    _debug(f"Initializing DB ({dialect})")
    with store.transaction() as conn:
        schema_sql = get_schema_sql(dialect)
        # Ensure only one process runs schema DDL at a time.
        # - Postgres: use an advisory lock.
        # - SQLite: DDL already takes an exclusive database lock.
        if dialect == "postgres":
            conn.execute("SELECT pg_advisory_lock(2147483646);")
            try:
                _exec_schema(conn, schema_sql, dialect=dialect)
            finally:
                conn.execute("SELECT pg_advisory_unlock(2147483646);")
        else:
            _exec_schema(conn, schema_sql, dialect=dialect)

        _migrate(conn, dialect=dialect)


def _exec_schema(conn: Any, ddl: str, *, dialect: str) -> None:
    if dialect == "postgres":
        # Execute multi-statement DDL (naive split is OK for our schema)
        statements = [s.strip() for s in ddl.split(";") if s.strip()]
        for stmt in statements:
            conn.execute(stmt)
        return

    # SQLite can run it in one go
    conn.executescript(ddl)


def _has_column(conn: Any, table: str, col: str, *, dialect: str) -> bool:
    if dialect == "postgres":
        r = conn.execute(
            """
            SELECT 1
            FROM information_schema.columns
            WHERE table_schema='public'
              AND table_name=?
              AND column_name=?
            LIMIT 1
            """,
            (table, col),
        ).fetchone()
        return r is not None

    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    return any(r["name"] == col for r in rows)


def _migrate(conn: Any, *, dialect: str) -> None:
    """Lightweight forward-only migrations for existing DBs."""
    # users: profile, entitlement and billing columns were added over time.
    user_cols_to_add = [
        ("display_name", "TEXT"),
        ("plan", "TEXT NOT NULL DEFAULT 'free'"),
        ("plan_until", "TEXT"),
        ("stripe_customer_id", "TEXT"),
        ("stripe_subscription_id", "TEXT"),
        ("last_login_at", "TEXT"),
    ]
    for col, ctype in user_cols_to_add:
        if not _has_column(conn, "users", col, dialect=dialect):
            conn.execute(f"ALTER TABLE users ADD COLUMN {col} {ctype}")

    conn.execute("CREATE INDEX IF NOT EXISTS idx_users_stripe_customer ON users (stripe_customer_id)")

    # matches: public share links were added later.
    if not _has_column(conn, "matches", "share_id", dialect=dialect):
        conn.execute("ALTER TABLE matches ADD COLUMN share_id TEXT")
    conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_matches_share_id ON matches (share_id)")
