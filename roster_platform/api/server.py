from __future__ import annotations

import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roster_platform import __version__
from roster_platform.auth.crud import bootstrap_admin_if_needed
from roster_platform.auth.security import configure_password_hashing
from roster_platform.config import Config, ephemeral_jwt_secret, load_config
from roster_platform.db import Store, init_db
from roster_platform.errors import ServiceError

from .auth_routes import router as auth_router
from .match_routes import router as match_router
from .me_routes import router as me_router
from .notification_routes import router as notification_router
from .public_routes import router as public_router
from .roster_routes import router as roster_router


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def _resolve_jwt_secret(cfg: Config) -> str:
    if cfg.AUTH_JWT_SECRET:
        return cfg.AUTH_JWT_SECRET
    _debug(
        "WARNING AUTH_JWT_SECRET is not set; using a random per-process secret. "
        "Issued tokens will stop working after a restart."
    )
    return ephemeral_jwt_secret()


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def _service_error(_request: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed bodies are InvalidInput (400), not FastAPI's default 422.
        return JSONResponse(
            status_code=400,
            content={"detail": "invalid_request", "errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"Unhandled error on {request.method} {request.url.path}: {exc!r}\n{traceback.format_exc()}")
        return JSONResponse(status_code=500, content={"detail": "internal_error"})


def create_app(cfg: Config | None = None) -> FastAPI:
    cfg = cfg or load_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_password_hashing(cfg.AUTH_PASSWORD_ROUNDS)
        app.state.cfg = cfg
        app.state.jwt_secret = _resolve_jwt_secret(cfg)

        # One store handle for the whole process lifetime.
        with Store(cfg.DB_DSN) as store:
            init_db(store)
            app.state.store = store

            boot = bootstrap_admin_if_needed(cfg, store)
            if boot:
                _debug(f"Bootstrapped initial admin user: email={boot.get('email')}")

            yield
            app.state.store = None

    app = FastAPI(title="Roster Platform", version=__version__, lifespan=lifespan)

    # CORS is mainly needed for local development (SPA dev server -> API).
    cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    _install_error_handlers(app)

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok"}

    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(roster_router)
    app.include_router(match_router)
    app.include_router(notification_router)
    app.include_router(public_router)
    return app


app = create_app()
