"""
HTTP Basic credential gate.

Why:
    Every participant operation is restricted to administrators. Requests are
    authenticated independently (no sessions or tokens): the `Authorization`
    header is decoded and checked against the stored admin list each time.

Behavior:
    1. Missing header or a scheme other than `Basic ` -> AuthSchemeError.
    2. Payload not base64/UTF-8, no `:` separator, or an empty username or
       password -> AuthFormatError.
    3. Stored admins with that username are compared using the configured
       matcher; no match -> InvalidCredentials.
    4. Any failure while reading the admin store -> AuthInfraError.

Security:
    The default matcher is plain equality against the stored plaintext value,
    which is how the admin table is provisioned today. Set
    `ADMIN_PASSWORD_COMPARE=constant_time` to compare with
    `hmac.compare_digest` instead; the gate itself does not change.
"""
from __future__ import annotations

import base64
import binascii
import hmac
import logging
import os
from typing import List, Optional, Protocol, Tuple

from census.identity_access.domain import (
    AdminIdentity,
    AdminRecord,
    AuthFormatError,
    AuthInfraError,
    AuthSchemeError,
    InvalidCredentials,
)

logger = logging.getLogger("census.identity_access")

BASIC_PREFIX = "Basic "
COMPARE_MODES = frozenset({"plaintext", "constant_time"})


class AdminStoreProtocol(Protocol):
    def list_by_username(self, username: str) -> List[AdminRecord]: ...


class CredentialMatcher(Protocol):
    def matches(self, supplied: str, stored: str) -> bool: ...


class PlaintextMatcher:
    """Exact string equality against the stored password."""

    def matches(self, supplied: str, stored: str) -> bool:
        return supplied == stored


class ConstantTimeMatcher:
    """Equality via `hmac.compare_digest` to avoid timing differences."""

    def matches(self, supplied: str, stored: str) -> bool:
        return hmac.compare_digest(supplied.encode("utf-8"), stored.encode("utf-8"))


def matcher_from_env() -> CredentialMatcher:
    mode = (os.getenv("ADMIN_PASSWORD_COMPARE", "plaintext") or "").strip().lower()
    if mode == "constant_time":
        return ConstantTimeMatcher()
    return PlaintextMatcher()


def parse_basic_authorization(header: Optional[str]) -> Tuple[str, str]:
    """Return `(username, password)` from a Basic `Authorization` header value."""
    if not header or not header.startswith(BASIC_PREFIX):
        raise AuthSchemeError()
    token = header[len(BASIC_PREFIX):].strip()
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise AuthFormatError() from exc
    # RFC 7617: the user-id cannot contain ':'; the password may.
    username, sep, password = decoded.partition(":")
    if not sep or not username or not password:
        raise AuthFormatError()
    return username, password


class BasicAuthGate:
    def __init__(self, store: AdminStoreProtocol, matcher: Optional[CredentialMatcher] = None) -> None:
        self._store = store
        self._matcher = matcher or PlaintextMatcher()

    def authenticate(self, header: Optional[str]) -> AdminIdentity:
        """Resolve the header to an admin identity or raise an AuthError kind."""
        username, password = parse_basic_authorization(header)
        try:
            candidates = self._store.list_by_username(username)
        except Exception as exc:
            logger.warning("Admin store lookup failed: %s", exc.__class__.__name__)
            raise AuthInfraError() from exc
        for rec in candidates:
            if self._matcher.matches(password, rec.password):
                return AdminIdentity(id=rec.id, username=rec.username)
        raise InvalidCredentials()


__all__ = [
    "AdminStoreProtocol",
    "CredentialMatcher",
    "PlaintextMatcher",
    "ConstantTimeMatcher",
    "matcher_from_env",
    "parse_basic_authorization",
    "BasicAuthGate",
    "COMPARE_MODES",
]
