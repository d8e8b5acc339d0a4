"""
Schema bootstrap helpers.

Intent:
    Create the `participants` and `admins` tables when they are missing so a
    fresh local database is usable without a separate migration step.

Security & Safety:
    - Controlled by `AUTO_CREATE_SCHEMA=true` on app startup; the startup
      guard refuses the flag in production-like environments.
    - Idempotent: every statement uses IF NOT EXISTS.
    - Never touches admin rows; admins are provisioned out of band.
"""
from __future__ import annotations

import logging
from typing import Sequence

import psycopg

from census.storage.config import auto_create_schema_enabled
from census.storage.pool import Database

_log = logging.getLogger("census.storage")

SCHEMA_STATEMENTS: Sequence[str] = (
    """
    create table if not exists public.participants (
        email       text primary key,
        firstname   text not null,
        lastname    text not null,
        dob         date not null,
        companyname text not null,
        salary      numeric not null,
        currency    text not null,
        country     text not null,
        city        text not null
    )
    """,
    """
    create table if not exists public.admins (
        id       serial primary key,
        username text not null,
        password text not null
    )
    """,
    "create index if not exists admins_username_idx on public.admins (username)",
)


def ensure_schema(db: Database) -> None:
    """Execute the schema statements on one pooled connection."""
    with db.connection() as conn:
        with conn.cursor() as cur:
            for statement in SCHEMA_STATEMENTS:
                cur.execute(statement)
    _log.info("Schema ensured (%d statements)", len(SCHEMA_STATEMENTS))


def ensure_schema_from_env(db: Database) -> bool:
    """Create tables when AUTO_CREATE_SCHEMA=true; return True when executed.

    Database errors are logged, not raised: startup proceeds and `/db-test`
    reports reachability.
    """
    if not auto_create_schema_enabled():
        return False
    try:
        ensure_schema(db)
    except psycopg.Error as exc:
        _log.warning("Schema bootstrap failed: %s: %s", exc.__class__.__name__, exc)
        return False
    return True


__all__ = ["SCHEMA_STATEMENTS", "ensure_schema", "ensure_schema_from_env"]
