"""
Database-backed admin store (Postgres).

Why: Admin credentials live in the `admins` table, provisioned outside this
service. The gate only reads them; nothing here writes.

Security:
- Rows are fetched by username only; the password comparison happens in the
  gate through a pluggable matcher so the comparison strategy can change
  without touching SQL.
- Passwords are never logged.

Note: Uses psycopg3 through the injected pool holder (`Database`). Driver
errors propagate as `psycopg.Error`; the gate maps them to `AuthInfraError`.
"""
from __future__ import annotations

import re
from typing import Any, List

from census.identity_access.domain import AdminRecord


class DBAdminStore:
    """Postgres-backed admin lookup.

    Parameters
    ----------
    db:
        Object exposing `connection()` as a context manager.
    table:
        Fully qualified table name. Defaults to `public.admins`.
    """

    def __init__(self, db: Any, table: str = "public.admins") -> None:
        # Validate table identifier early (it is interpolated into SQL)
        if not re.match(r'^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$', table or ''):
            raise ValueError("Invalid table name")
        self._db = db
        self._table = table

    def list_by_username(self, username: str) -> List[AdminRecord]:
        with self._db.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"select id, username, password from {self._table} where username = %s order by id",
                    (username,),
                )
                rows = cur.fetchall()
        return [AdminRecord(id=int(row[0]), username=row[1], password=row[2]) for row in rows]
