"""
Configuration and startup security checks for the Census API.

Why: The API guards personal data (names, birth dates, salaries). This module
provides a single guard that refuses obviously insecure production settings
without burdening local development.

Permissions: The caller needs no special privileges. The function simply reads
environment variables and raises `SystemExit` on fatal misconfiguration.
"""
from __future__ import annotations

import os
import re
from urllib.parse import urlparse

from census.identity_access.basic_auth import COMPARE_MODES
from census.storage.config import DB_PASSWORD_DEFAULT


def _is_prod_like(env: str) -> bool:
    env_l = (env or "").lower()
    return env_l in {"prod", "production", "stage", "staging"}


def _dsn_password(dsn: str) -> str | None:
    if "://" in dsn:
        try:
            return urlparse(dsn).password
        except ValueError:
            raise SystemExit("Refusing to start: invalid DATABASE_URL value in production.")
    # Keyword form: host=... user=... password=...
    m = re.search(r"\bpassword\s*=\s*([^\s]+)", dsn)
    return m.group(1) if m else None


def current_environment() -> str:
    return (os.getenv("CENSUS_ENV", "dev") or "dev").strip().lower()


def ensure_secure_config_on_startup() -> None:
    """Fail fast on insecure production configuration.

    Checks (prod-like environments only):
    - A database DSN source is configured (DATABASE_URL or DB_HOST).
    - DATABASE_URL must not explicitly disable TLS.
    - The database password must not be the local-development default.
    - ADMIN_PASSWORD_COMPARE must name a known strategy.
    - AUTO_CREATE_SCHEMA must be off; production schemas are migrated.
    """

    if not _is_prod_like(current_environment()):
        return  # dev/test remain permissive

    dsn = (os.getenv("DATABASE_URL") or "").strip()
    if not dsn and not (os.getenv("DB_HOST") or "").strip():
        raise SystemExit("Refusing to start: DATABASE_URL (or DB_HOST) must be set in production.")

    if "sslmode=disable" in dsn:
        raise SystemExit(
            "Refusing to start: DATABASE_URL contains sslmode=disable in production. Use sslmode=require or verify TLS."
        )

    password = _dsn_password(dsn) if dsn else os.getenv("DB_PASSWORD")
    if not password or password == DB_PASSWORD_DEFAULT:
        raise SystemExit("Refusing to start: database password is unset or the development default in production.")

    mode = (os.getenv("ADMIN_PASSWORD_COMPARE", "plaintext") or "").strip().lower()
    if mode not in COMPARE_MODES:
        raise SystemExit(
            f"Refusing to start: ADMIN_PASSWORD_COMPARE must be one of {sorted(COMPARE_MODES)} (got {mode!r})."
        )

    if (os.getenv("AUTO_CREATE_SCHEMA", "false") or "").strip().lower() == "true":
        raise SystemExit("Refusing to start: AUTO_CREATE_SCHEMA must be false in production/staging.")
