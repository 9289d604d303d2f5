"""Request checks: bearer-token authorization and trace id generation."""

from __future__ import annotations

import os
import uuid

TRACE_HEADER = "X-Trace-Id"
TOKEN_ENV_VAR = "NOTIFYSVC_AUTH_TOKEN"
_DEFAULT_TOKEN = "password"


class AuthError(Exception):
    """Raised when a request fails authorization; carries the HTTP status."""

    status_code = 401

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _expected_token() -> str:
    return os.environ.get(TOKEN_ENV_VAR, _DEFAULT_TOKEN)


def check_authorization(header: str | None) -> str:
    """Validate an ``Authorization`` header value and return the token it carries."""
    if not header:
        raise AuthError("Authorization header is required")
    parts = header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise AuthError("Invalid authorization format. Expected 'Bearer <token>'")
    if parts[1] != _expected_token():
        raise AuthError("Unauthorized")
    return parts[1]


def new_trace_id() -> str:
    """Return a fresh random trace id."""
    return str(uuid.uuid4())