"""Error taxonomy shared by the store layer and the API.

Store functions raise these; the API maps them to HTTP responses with a
snake_case `detail` code. Anything else that escapes a handler becomes an
opaque 500.
"""

from __future__ import annotations

from typing import Dict, Optional


class ServiceError(Exception):
    status_code: int = 500
    default_detail: str = "internal_error"

    def __init__(self, detail: str | None = None, *, headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)


class InvalidInput(ServiceError):
    status_code = 400
    default_detail = "invalid_input"


class Unauthorized(ServiceError):
    status_code = 401
    default_detail = "unauthorized"

    def __init__(self, detail: str | None = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ServiceError):
    status_code = 403
    default_detail = "forbidden"


class NotFound(ServiceError):
    # Also used when the row exists but belongs to someone else.
    status_code = 404
    default_detail = "not_found"


class Conflict(ServiceError):
    status_code = 409
    default_detail = "conflict"
