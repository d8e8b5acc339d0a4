"""Repository interface for participant persistence."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from census.participants.domain import ParticipantRecord


class ParticipantRepoProtocol(Protocol):
    """One method per statement the API issues.

    Implementations raise `DuplicateKeyError` for email conflicts on insert and
    `StorageError` for any other backing-store failure. Keyed reads return None
    when no row matches; update/delete return the number of affected rows.
    """

    def insert(self, record: ParticipantRecord) -> None: ...

    def list_all(self) -> List[Dict[str, Any]]: ...

    def list_summaries(self) -> List[Dict[str, Any]]: ...

    def get_details(self, email: str) -> Optional[Dict[str, Any]]: ...

    def get_work(self, email: str) -> Optional[Dict[str, Any]]: ...

    def get_home(self, email: str) -> Optional[Dict[str, Any]]: ...

    def update(self, email: str, record: ParticipantRecord) -> int: ...

    def delete(self, email: str) -> int: ...


__all__ = ["ParticipantRepoProtocol"]
