"""
Process-wide PostgreSQL connection pool.

Why:
    Every request issues exactly one statement. Opening a fresh connection per
    call is wasteful under load, so the app keeps one `psycopg_pool` pool that
    is opened on startup and closed on shutdown, and injects this wrapper into
    the repositories instead of letting them reach for a global.

Behavior:
    - `open()` creates and opens the pool (idempotent); `close()` tears it down.
    - `connection()` borrows a connection for one unit of work. Connections
      run in autocommit mode, so each statement commits on its own.
    - Borrowing from a closed pool raises `psycopg_pool.PoolClosed`, which is a
      `psycopg.OperationalError` and surfaces as a storage failure.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from psycopg_pool import ConnectionPool, PoolClosed

from census.storage.config import PoolSettings, get_database_url, get_pool_settings

_log = logging.getLogger("census.storage")


class Database:
    """Holder for the shared connection pool.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Resolved from env when omitted.
    settings:
        Pool bounds. Resolved from env when omitted.
    pool:
        Pre-built pool object exposing `connection()` (tests inject fakes).
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        settings: Optional[PoolSettings] = None,
        *,
        pool: Any = None,
    ) -> None:
        self._dsn = dsn
        self._settings = settings
        self._pool = pool

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self) -> None:
        if self._pool is not None:
            return
        dsn = self._dsn or get_database_url()
        settings = self._settings or get_pool_settings()
        pool = ConnectionPool(
            dsn,
            min_size=settings.min_size,
            max_size=settings.max_size,
            timeout=settings.timeout,
            kwargs={"autocommit": True},
            name="census",
            open=False,
        )
        # Do not block startup on DB reachability; /db-test reports it.
        pool.open(wait=False)
        self._pool = pool
        _log.info("Database pool opened (min=%s max=%s)", settings.min_size, settings.max_size)

    def close(self) -> None:
        pool, self._pool = self._pool, None
        if pool is None:
            return
        pool.close()
        _log.info("Database pool closed")

    @contextmanager
    def connection(self) -> Iterator[Any]:
        if self._pool is None:
            raise PoolClosed("database pool is not open")
        with self._pool.connection() as conn:
            yield conn

    def probe(self) -> Dict[str, Any]:
        """Run `SELECT 1` and return the row as a mapping (raises on failure)."""
        with self.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("select 1 as ok")
                row = cur.fetchone()
        return {"ok": row[0] if row else None}


__all__ = ["Database"]
