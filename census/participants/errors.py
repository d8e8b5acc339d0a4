"""
Participant domain errors.

Why:
    Repositories and the validation routine raise these instead of driver
    exceptions so the web adapter can map outcomes to HTTP results without
    knowing which storage engine sits underneath.
"""
from __future__ import annotations


class ParticipantError(Exception):
    """Base class for participant outcomes that are not a success."""


class ValidationError(ParticipantError, ValueError):
    """Request body failed validation; carries every reason found."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors) or "validation_failed")
        self.errors = list(errors)


class EmailMismatchError(ParticipantError, ValueError):
    """Full update body names a different participant than the path."""

    def __init__(self) -> None:
        super().__init__("Email in URL and body must match")


class NotFoundError(ParticipantError, LookupError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Participant with email {email} not found")
        self.email = email


class DuplicateKeyError(ParticipantError, ValueError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Participant with email {email} already exists")
        self.email = email


class StorageError(ParticipantError, RuntimeError):
    """Any other backing-store failure (connectivity, pool timeout, SQL error)."""


__all__ = [
    "ParticipantError",
    "ValidationError",
    "EmailMismatchError",
    "NotFoundError",
    "DuplicateKeyError",
    "StorageError",
]
