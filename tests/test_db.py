"""
Tests for the store plumbing: placeholder rewriting, the Postgres DDL and
adapter, migrations and the read path.
"""
import sqlite3

import pytest

from roster_platform.db import PGConnection, Store, _exec_schema, _qmark_to_pct, init_db
from roster_platform.schema import SCHEMA_SQLITE, get_schema_sql


class _RecordingCursor:
    def __init__(self, log):
        self.log = log
        self.rowcount = 1

    def execute(self, sql, params):
        self.log.append((sql, params))

    def fetchone(self):
        return {"n": 1}

    def fetchall(self):
        return []

    def close(self):
        pass


class _RecordingConnection:
    """Stands in for a psycopg2 connection; records what gets executed."""

    IntegrityError = type("IntegrityError", (Exception,), {})

    def __init__(self):
        self.log = []
        self.committed = False

    def cursor(self):
        return _RecordingCursor(self.log)

    def commit(self):
        self.committed = True


class TestQmarkToPct:
    def test_placeholders_rewritten(self):
        assert _qmark_to_pct("SELECT * FROM t WHERE a=? AND b=?") == "SELECT * FROM t WHERE a=%s AND b=%s"

    def test_question_marks_in_literals_kept(self):
        sql = "SELECT '?' AS q, \"odd?col\" FROM t WHERE a=? AND b='it''s ?'"
        assert _qmark_to_pct(sql) == "SELECT '?' AS q, \"odd?col\" FROM t WHERE a=%s AND b='it''s ?'"

    def test_no_placeholders(self):
        assert _qmark_to_pct("SELECT 1") == "SELECT 1"


class TestPostgresSchema:
    def test_conversion(self):
        ddl = get_schema_sql("postgres")
        assert "PRAGMA" not in ddl
        assert "AUTOINCREMENT" not in ddl
        assert "user_id BIGSERIAL PRIMARY KEY" in ddl
        assert get_schema_sql("postgresql") == ddl
        assert get_schema_sql("sqlite") == SCHEMA_SQLITE

    def test_statements_split_cleanly(self):
        """Every statement the naive ';' split yields is a CREATE."""
        conn = PGConnection(_RecordingConnection())
        _exec_schema(conn, get_schema_sql("postgres"), dialect="postgres")
        statements = [sql for sql, _ in conn._conn.log]
        assert statements
        for stmt in statements:
            body = "\n".join(line for line in stmt.splitlines() if not line.strip().startswith("--"))
            assert body.strip().upper().startswith("CREATE "), stmt


class TestPGConnection:
    def test_execute_rewrites_placeholders_and_passes_params(self):
        raw = _RecordingConnection()
        conn = PGConnection(raw)
        cur = conn.execute("UPDATE rosters SET name=? WHERE id=?", ["x", "r1"])
        assert raw.log == [("UPDATE rosters SET name=%s WHERE id=%s", ("x", "r1"))]
        assert cur.rowcount == 1
        assert cur.fetchone() == {"n": 1}

    def test_integrity_error_comes_from_driver(self):
        raw = _RecordingConnection()
        assert PGConnection(raw).IntegrityError is raw.IntegrityError

    def test_commit_passthrough(self):
        raw = _RecordingConnection()
        PGConnection(raw).commit()
        assert raw.committed


def test_migrate_adds_columns_to_old_database(tmp_path):
    """An older file without the later users/matches columns is brought forward."""
    path = tmp_path / "old.sqlite"
    raw = sqlite3.connect(str(path))
    raw.executescript(
        """
        CREATE TABLE users (
            user_id INTEGER PRIMARY KEY AUTOINCREMENT,
            email TEXT NOT NULL UNIQUE,
            password_hash TEXT NOT NULL,
            is_admin INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        CREATE TABLE matches (
            id TEXT PRIMARY KEY,
            user_id INTEGER NOT NULL,
            data TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );
        """
    )
    raw.close()

    with Store(str(path)) as store:
        init_db(store)
        with store.read() as conn:
            user_cols = {r["name"] for r in conn.execute("PRAGMA table_info(users)").fetchall()}
            match_cols = {r["name"] for r in conn.execute("PRAGMA table_info(matches)").fetchall()}

    assert {"display_name", "plan", "plan_until", "stripe_customer_id", "last_login_at"} <= user_cols
    assert "share_id" in match_cols


def test_read_sees_only_committed_data(store):
    with store.transaction() as conn:
        conn.execute(
            "INSERT INTO game_data (key, data, updated_at) VALUES (?,?,?)",
            ("teams", "[]", "2026-01-01T00:00:00Z"),
        )
        with store.read() as reader:
            assert reader.execute("SELECT COUNT(*) AS n FROM game_data").fetchone()["n"] == 0

    with store.read() as reader:
        assert reader.execute("SELECT COUNT(*) AS n FROM game_data").fetchone()["n"] == 1


def test_read_on_in_memory_store_uses_writer_connection():
    with Store(":memory:") as store:
        init_db(store)
        with store.transaction() as conn:
            conn.execute(
                "INSERT INTO game_data (key, data, updated_at) VALUES (?,?,?)",
                ("skills", "[]", "2026-01-01T00:00:00Z"),
            )
        with store.read() as conn:
            assert conn.execute("SELECT key FROM game_data").fetchone()["key"] == "skills"


def test_read_requires_open_store(tmp_path):
    with pytest.raises(RuntimeError):
        with Store(str(tmp_path / "closed.sqlite")).read():
            pass
