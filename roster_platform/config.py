import os
import secrets
from dataclasses import dataclass

from dotenv import load_dotenv

# Load a local .env file if present.
load_dotenv()


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    # Preferred: set ROSTER_DATABASE_URL (or DATABASE_URL) to use Postgres.
    # Fallback: ROSTER_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("ROSTER_DATABASE_URL")
        or os.environ.get("DATABASE_URL")
        or os.environ.get("ROSTER_DB_PATH", "./roster_platform.sqlite")
    )

    # -----------------
    # Auth (JWT)
    # -----------------
    # Empty means "not configured": create_app() then signs with a random
    # per-process secret, so tokens do not survive a restart.
    AUTH_JWT_SECRET: str = (os.environ.get("AUTH_JWT_SECRET") or "").strip()

    # pbkdf2_sha256 work factor. Lower it only for tests.
    AUTH_PASSWORD_ROUNDS: int = int(os.environ.get("AUTH_PASSWORD_ROUNDS", "29000"))

    # Bootstrap the first admin user when the users table is empty.
    # Nothing is created unless both are set.
    AUTH_BOOTSTRAP_ADMIN_EMAIL: str = (os.environ.get("AUTH_BOOTSTRAP_ADMIN_EMAIL") or "").strip()
    AUTH_BOOTSTRAP_ADMIN_PASSWORD: str = os.environ.get("AUTH_BOOTSTRAP_ADMIN_PASSWORD") or ""

    # -----------------
    # CORS (development)
    # -----------------
    # The SPA dev server runs on another origin; in production (same origin behind
    # a reverse proxy) CORS is not required.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    )


def load_config() -> Config:
    return Config()


def ephemeral_jwt_secret() -> str:
    return secrets.token_urlsafe(32)
