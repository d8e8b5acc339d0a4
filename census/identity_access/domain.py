"""
Identity domain types and the credential-gate error kinds.

Why:
- Keep the admin identity shape and rejection kinds in one place so the gate,
  the stores and the web middleware agree on them.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AdminRecord:
    """Stored admin row (password as stored, plaintext)."""

    id: int
    username: str
    password: str


@dataclass(frozen=True)
class AdminIdentity:
    """Identity attached to an authenticated request. Never carries the password."""

    id: int
    username: str


class AuthError(Exception):
    """Base class for credential gate rejections."""

    kind = "AuthError"
    status_code = 401
    message = "Authentication failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class AuthSchemeError(AuthError):
    kind = "AuthSchemeError"
    message = "Missing or invalid Authorization header. Basic Auth required."


class AuthFormatError(AuthError):
    kind = "AuthFormatError"
    message = "Invalid Basic Auth credentials format"


class InvalidCredentials(AuthError):
    kind = "InvalidCredentials"
    message = "Invalid username or password"


class AuthInfraError(AuthError):
    kind = "AuthInfraError"
    status_code = 500
    message = "Authentication failed due to server error"


__all__ = [
    "AdminRecord",
    "AdminIdentity",
    "AuthError",
    "AuthSchemeError",
    "AuthFormatError",
    "InvalidCredentials",
    "AuthInfraError",
]
