"""
Centralized database configuration.

Intent:
    Provide a single source of truth for the PostgreSQL DSN and pool bounds so
    the web app, tools and tests resolve the same settings.

Behavior:
    - `DATABASE_URL` wins when set.
    - Otherwise a DSN is composed from DB_HOST / DB_PORT / DB_USER /
      DB_PASSWORD / DB_NAME with local-development defaults.
    - Pool bounds come from DB_POOL_MIN_SIZE / DB_POOL_MAX_SIZE /
      DB_POOL_TIMEOUT; invalid values fall back to defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import quote


DB_HOST_DEFAULT = "127.0.0.1"
DB_PORT_DEFAULT = 5432
DB_USER_DEFAULT = "census"
DB_PASSWORD_DEFAULT = "census"
DB_NAME_DEFAULT = "census"

POOL_MIN_SIZE_DEFAULT = 1
POOL_MAX_SIZE_DEFAULT = 10
POOL_TIMEOUT_DEFAULT = 10.0


def _parse_int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _parse_float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def get_database_url() -> str:
    """Return the DSN for the participants database."""
    explicit = (os.getenv("DATABASE_URL") or "").strip()
    if explicit:
        return explicit
    host = (os.getenv("DB_HOST") or DB_HOST_DEFAULT).strip()
    port = _parse_int_env("DB_PORT", DB_PORT_DEFAULT, minimum=1)
    user = (os.getenv("DB_USER") or DB_USER_DEFAULT).strip()
    password = os.getenv("DB_PASSWORD") or DB_PASSWORD_DEFAULT
    name = (os.getenv("DB_NAME") or DB_NAME_DEFAULT).strip()
    return f"postgresql://{quote(user, safe='')}:{quote(password, safe='')}@{host}:{port}/{name}"


@dataclass(frozen=True)
class PoolSettings:
    min_size: int = POOL_MIN_SIZE_DEFAULT
    max_size: int = POOL_MAX_SIZE_DEFAULT
    timeout: float = POOL_TIMEOUT_DEFAULT


def get_pool_settings() -> PoolSettings:
    min_size = _parse_int_env("DB_POOL_MIN_SIZE", POOL_MIN_SIZE_DEFAULT)
    max_size = _parse_int_env("DB_POOL_MAX_SIZE", POOL_MAX_SIZE_DEFAULT, minimum=1)
    # psycopg_pool requires max_size >= min_size
    max_size = max(max_size, min_size)
    return PoolSettings(
        min_size=min_size,
        max_size=max_size,
        timeout=_parse_float_env("DB_POOL_TIMEOUT", POOL_TIMEOUT_DEFAULT),
    )


def auto_create_schema_enabled() -> bool:
    return (os.getenv("AUTO_CREATE_SCHEMA", "false") or "").strip().lower() == "true"


__all__ = [
    "PoolSettings",
    "get_database_url",
    "get_pool_settings",
    "auto_create_schema_enabled",
]
