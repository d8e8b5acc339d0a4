"""
In-memory admin store for development and tests.

Why: Exercise the credential gate without a database. For production the
app wires `DBAdminStore`, which reads the same shape from the `admins` table.
"""
from __future__ import annotations

from typing import Iterable, List, Tuple

from census.identity_access.domain import AdminRecord


class InMemoryAdminStore:
    def __init__(self, admins: Iterable[Tuple[str, str]] = ()) -> None:
        self._data: List[AdminRecord] = []
        for username, password in admins:
            self.add(username, password)

    def add(self, username: str, password: str) -> AdminRecord:
        rec = AdminRecord(id=len(self._data) + 1, username=username, password=password)
        self._data.append(rec)
        return rec

    def list_by_username(self, username: str) -> List[AdminRecord]:
        return [rec for rec in self._data if rec.username == username]
