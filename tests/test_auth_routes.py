"""
Tests for registration, login and bearer-token access control.
"""
from datetime import datetime, timedelta, timezone

from roster_platform.auth.security import create_access_token
from roster_platform.models import Claims

from tests.helpers import TEST_SECRET, auth_header, login_admin, register


class TestRegister:
    def test_register_returns_token_and_user(self, client):
        r = client.post("/auth/register", json={"email": "a@x.com", "password": "secret1"})
        assert r.status_code == 201
        body = r.json()
        assert body["token"]
        assert body["token_type"] == "bearer"
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["isAdmin"] is False
        assert "password_hash" not in body["user"]

    def test_duplicate_email_conflicts(self, client):
        register(client, "a@x.com")
        r = client.post("/auth/register", json={"email": "a@x.com", "password": "another1"})
        assert r.status_code == 409
        assert r.json()["detail"] == "email_exists"

    def test_short_password_rejected(self, client):
        r = client.post("/auth/register", json={"email": "a@x.com", "password": "12345"})
        assert r.status_code == 400
        assert r.json()["detail"] == "password_too_short"

    def test_missing_fields_rejected(self, client):
        r = client.post("/auth/register", json={"email": "a@x.com"})
        assert r.status_code == 400
        assert r.json()["detail"] == "email_and_password_required"

    def test_register_cannot_grant_admin(self, client):
        """Extra fields in the body are ignored; registration never makes an admin."""
        r = client.post(
            "/auth/register",
            json={"email": "a@x.com", "password": "secret1", "isAdmin": True},
        )
        assert r.status_code == 201
        assert r.json()["user"]["isAdmin"] is False


class TestLogin:
    def test_login_after_register(self, client):
        _, user = register(client, "a@x.com", "secret1")
        r = client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
        assert r.status_code == 200
        body = r.json()
        assert body["user"]["id"] == user["id"]

        me = client.get("/auth/me", headers=auth_header(body["token"]))
        assert me.status_code == 200
        assert me.json()["email"] == "a@x.com"

    def test_wrong_password_unauthorized(self, client):
        register(client, "a@x.com", "secret1")
        r = client.post("/auth/login", json={"email": "a@x.com", "password": "wrong-one"})
        assert r.status_code == 401
        assert r.json()["detail"] == "invalid_credentials"

    def test_unknown_email_unauthorized(self, client):
        r = client.post("/auth/login", json={"email": "nobody@x.com", "password": "secret1"})
        assert r.status_code == 401
        assert r.json()["detail"] == "invalid_credentials"

    def test_login_records_last_login(self, client):
        _, user = register(client, "a@x.com", "secret1")
        client.post("/auth/login", json={"email": "a@x.com", "password": "secret1"})
        with client.app.state.store.transaction() as conn:
            row = conn.execute("SELECT last_login_at FROM users WHERE user_id=?", (user["id"],)).fetchone()
        assert row["last_login_at"]


class TestAccessControl:
    def test_missing_token(self, client):
        r = client.get("/rosters")
        assert r.status_code == 401
        assert r.json()["detail"] == "missing_token"
        assert r.headers["www-authenticate"] == "Bearer"

    def test_non_bearer_scheme(self, client):
        r = client.get("/rosters", headers={"Authorization": "Basic YTpi"})
        assert r.status_code == 401

    def test_garbage_token(self, client):
        r = client.get("/rosters", headers=auth_header("not-a-token"))
        assert r.status_code == 401
        assert r.json()["detail"] == "token_invalid"

    def test_token_signed_with_other_secret(self, client):
        token = create_access_token(secret="someone-else", claims=Claims(user_id=1, email="a@x.com"))
        r = client.get("/rosters", headers=auth_header(token))
        assert r.status_code == 401

    def test_expired_token(self, client):
        token = create_access_token(
            secret=TEST_SECRET,
            claims=Claims(user_id=1, email="a@x.com"),
            issued_at=datetime.now(timezone.utc) - timedelta(days=8),
        )
        r = client.get("/rosters", headers=auth_header(token))
        assert r.status_code == 401
        assert r.json()["detail"] == "token_expired"

    def test_unauthenticated_before_body_validation(self, client):
        """Auth is checked before the body is looked at."""
        r = client.post("/rosters", json={})
        assert r.status_code == 401

    def test_non_admin_forbidden_on_admin_route(self, client):
        token, _ = register(client, "a@x.com")
        r = client.put("/game-data/players", json={"data": []}, headers=auth_header(token))
        assert r.status_code == 403
        assert r.json()["detail"] == "admin_required"

    def test_admin_allowed_on_admin_route(self, client):
        token = login_admin(client)
        r = client.put("/game-data/players", json={"data": []}, headers=auth_header(token))
        assert r.status_code == 200

    def test_admin_claim_is_trusted_from_token(self, client):
        """Demoting a user does not affect tokens already issued."""
        token = login_admin(client)
        with client.app.state.store.transaction() as conn:
            conn.execute("UPDATE users SET is_admin=0")
        r = client.put("/game-data/teams", json={"data": []}, headers=auth_header(token))
        assert r.status_code == 200
