from __future__ import annotations

from typing import Any, Dict, Tuple

from fastapi.testclient import TestClient

from roster_platform.auth.crud import create_user, hash_new_password


TEST_SECRET = "test-secret"
TEST_ROUNDS = 1000


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def register(client: TestClient, email: str, password: str = "password1") -> Tuple[str, Dict[str, Any]]:
    r = client.post("/auth/register", json={"email": email, "password": password})
    assert r.status_code == 201, r.text
    body = r.json()
    return body["token"], body["user"]


def login_admin(client: TestClient, email: str = "admin@example.com") -> str:
    """Admins cannot self-register; create one in the store and log in."""
    with client.app.state.store.transaction() as conn:
        create_user(conn, email=email, password_hash=hash_new_password("password1"), is_admin=True)
    r = client.post("/auth/login", json={"email": email, "password": "password1"})
    assert r.status_code == 200, r.text
    return r.json()["token"]


def roster_body(roster_id: str, **overrides: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "id": roster_id,
        "name": "Main",
        "teamId": "orc",
        "teamName": "Orcs",
        "data": {"players": []},
    }
    body.update(overrides)
    return body
