"""Shared fixtures: a throwaway SQLite store and an app wired to it."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from roster_platform.api.server import create_app
from roster_platform.auth.crud import create_user, hash_new_password
from roster_platform.auth.security import configure_password_hashing
from roster_platform.config import Config
from roster_platform.db import Store, init_db

from tests.helpers import TEST_ROUNDS, TEST_SECRET


@pytest.fixture(autouse=True)
def fast_hashing():
    """Keep pbkdf2 cheap so the suite stays quick."""
    configure_password_hashing(TEST_ROUNDS)


@pytest.fixture
def cfg(tmp_path) -> Config:
    return Config(
        DB_DSN=str(tmp_path / "roster_test.sqlite"),
        AUTH_JWT_SECRET=TEST_SECRET,
        AUTH_PASSWORD_ROUNDS=TEST_ROUNDS,
        AUTH_BOOTSTRAP_ADMIN_EMAIL="",
        AUTH_BOOTSTRAP_ADMIN_PASSWORD="",
        CORS_ALLOW_ORIGINS="",
    )


@pytest.fixture
def store(tmp_path):
    """An initialized store, for tests that call the store layer directly."""
    with Store(str(tmp_path / "roster_unit.sqlite")) as s:
        init_db(s)
        yield s


@pytest.fixture
def make_user(store):
    password_hash = hash_new_password("password1")

    def _make(email: str, *, is_admin: bool = False) -> int:
        with store.transaction() as conn:
            return int(create_user(conn, email=email, password_hash=password_hash, is_admin=is_admin)["id"])

    return _make


@pytest.fixture
def client(cfg):
    app = create_app(cfg)
    with TestClient(app) as c:
        yield c

