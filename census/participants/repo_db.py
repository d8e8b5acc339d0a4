"""
Postgres-backed repository for participants.

Design:
    - Minimal psycopg3 usage; each call borrows one pooled connection for a
      single statement and returns plain dicts, keeping the web adapter
      independent of any ORM.
    - The pool is injected (see `census.storage.pool.Database`), never looked
      up globally, so tests can pass a fake.
    - Driver errors are translated here: SQLSTATE 23505 (unique violation on
      `email`) becomes `DuplicateKeyError`, every other `psycopg.Error`
      (including pool timeouts) becomes `StorageError`.
"""
from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import psycopg
from psycopg.errors import UniqueViolation

from census.participants.domain import (
    COLUMNS,
    DETAIL_COLUMNS,
    HOME_COLUMNS,
    SUMMARY_COLUMNS,
    UPDATE_COLUMNS,
    WORK_COLUMNS,
    ParticipantRecord,
    row_to_dict,
)
from census.participants.errors import DuplicateKeyError, StorageError

logger = logging.getLogger("census.participants")

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


class DBParticipantRepo:
    def __init__(self, db: Any, table: str = "public.participants") -> None:
        """Bind the repository to a pool holder and a table name.

        Parameters:
            db: Object exposing `connection()` as a context manager
                (`Database` in production, a fake in tests).
            table: Optionally schema-qualified table name; validated early
                because it is interpolated into SQL text.
        """
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._db = db
        self._table = table
        cols = ", ".join(COLUMNS)
        placeholders = ", ".join(["%s"] * len(COLUMNS))
        assignments = ", ".join(f"{c} = %s" for c in UPDATE_COLUMNS)
        self._sql_insert = f"insert into {table} ({cols}) values ({placeholders})"
        self._sql_select_all = f"select {cols} from {table} order by email"
        self._sql_select_summaries = f"select firstname, lastname, email from {table} order by email"
        self._sql_select_details = f"select firstname, lastname, dob from {table} where email = %s"
        self._sql_select_work = (
            f"select companyname as \"companyName\", salary, currency from {table} where email = %s"
        )
        self._sql_select_home = f"select country, city from {table} where email = %s"
        self._sql_update = f"update {table} set {assignments} where email = %s"
        self._sql_delete = f"delete from {table} where email = %s"

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        try:
            with self._db.connection() as conn:
                with conn.cursor() as cur:
                    yield cur
        except UniqueViolation:
            raise
        except psycopg.Error as exc:
            logger.warning("Participant statement failed: %s", exc.__class__.__name__)
            raise StorageError(str(exc) or exc.__class__.__name__) from exc

    def _fetch_all(self, sql: str, columns: Tuple[str, ...], params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute(sql, tuple(params))
            rows = cur.fetchall()
        return [row_to_dict(row, columns) for row in rows]

    def _fetch_one(self, sql: str, columns: Tuple[str, ...], email: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute(sql, (email,))
            row = cur.fetchone()
        return row_to_dict(row, columns) if row else None

    def _execute_count(self, sql: str, params: Sequence[Any]) -> int:
        with self._cursor() as cur:
            cur.execute(sql, tuple(params))
            return max(int(cur.rowcount or 0), 0)

    # --- Writes -------------------------------------------------------------------
    def insert(self, record: ParticipantRecord) -> None:
        try:
            with self._cursor() as cur:
                cur.execute(self._sql_insert, record.params())
        except UniqueViolation as exc:
            raise DuplicateKeyError(record.email) from exc

    def update(self, email: str, record: ParticipantRecord) -> int:
        return self._execute_count(self._sql_update, (*record.update_params(), email))

    def delete(self, email: str) -> int:
        return self._execute_count(self._sql_delete, (email,))

    # --- Reads --------------------------------------------------------------------
    def list_all(self) -> List[Dict[str, Any]]:
        return self._fetch_all(self._sql_select_all, COLUMNS)

    def list_summaries(self) -> List[Dict[str, Any]]:
        return self._fetch_all(self._sql_select_summaries, SUMMARY_COLUMNS)

    def get_details(self, email: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(self._sql_select_details, DETAIL_COLUMNS, email)

    def get_work(self, email: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(self._sql_select_work, WORK_COLUMNS, email)

    def get_home(self, email: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(self._sql_select_home, HOME_COLUMNS, email)


__all__ = ["DBParticipantRepo"]
