"""
Participant operations: validate, run one statement, map the outcome.

Why:
    All eight operations follow the same shape. `ParticipantService._execute`
    owns that shape once, so the mapping from domain errors to HTTP-shaped
    results cannot drift between endpoints.

Mapping:
    - ValidationError        -> 400 {"error": "Validation failed", "details": [...]}
    - EmailMismatchError     -> 400 {"error": "Email in URL and body must match"}
    - DuplicateKeyError      -> 400 {"error": "Participant with email <e> already exists"}
    - NotFoundError          -> 404 {"error": "Participant with email <e> not found"}
    - StorageError           -> 500 {"error": <per-operation failure message>}

Storage errors are logged here and never retried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from census.participants.domain import ParticipantRecord, flatten_body
from census.participants.errors import (
    DuplicateKeyError,
    EmailMismatchError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from census.participants.storage import ParticipantRepoProtocol
from census.participants.validation import validate_participant_body

logger = logging.getLogger("census.participants")


@dataclass(frozen=True)
class OperationResult:
    status_code: int
    body: Dict[str, Any]


def _require_valid(body: Any) -> None:
    result = validate_participant_body(body)
    if not result.valid:
        raise ValidationError(result.errors)


class ParticipantService:
    def __init__(self, repo: ParticipantRepoProtocol) -> None:
        self._repo = repo

    def _execute(
        self,
        *,
        action: str,
        statement: Callable[[], Any],
        render: Callable[[Any], Dict[str, Any]],
        failure: str,
        validate: Optional[Callable[[], None]] = None,
        missing_email: Optional[str] = None,
        success_status: int = 200,
    ) -> OperationResult:
        """Run one operation end to end.

        Parameters:
            action: Short label used in log lines.
            statement: Issues exactly one storage call and returns its outcome.
            render: Builds the success body from the outcome.
            failure: Client-facing message for storage failures.
            validate: Optional precheck; raises before any storage call.
            missing_email: When set, a falsy outcome (no row / zero rows
                affected) means the keyed participant does not exist.
            success_status: HTTP status for the success result.
        """
        try:
            if validate is not None:
                validate()
            outcome = statement()
            if missing_email is not None and not outcome:
                raise NotFoundError(missing_email)
        except ValidationError as exc:
            return OperationResult(400, {"error": "Validation failed", "details": exc.errors})
        except (EmailMismatchError, DuplicateKeyError) as exc:
            logger.info("%s rejected: %s", action, exc.__class__.__name__)
            return OperationResult(400, {"error": str(exc)})
        except NotFoundError as exc:
            return OperationResult(404, {"error": str(exc)})
        except StorageError as exc:
            logger.error("%s failed: %s", action, exc, exc_info=exc)
            return OperationResult(500, {"error": failure})
        return OperationResult(success_status, render(outcome))

    # --- Writes -------------------------------------------------------------------
    def create(self, body: Any) -> OperationResult:
        return self._execute(
            action="create_participant",
            validate=lambda: _require_valid(body),
            statement=lambda: self._repo.insert(ParticipantRecord.from_body(body)),
            render=lambda _: {
                "message": "Participant added successfully",
                "participant": flatten_body(body),
            },
            failure="Failed to add participant",
            success_status=201,
        )

    def update(self, email: str, body: Any) -> OperationResult:
        def _validate() -> None:
            _require_valid(body)
            if body["participant"]["email"] != email:
                raise EmailMismatchError()

        return self._execute(
            action="update_participant",
            validate=_validate,
            statement=lambda: self._repo.update(email, ParticipantRecord.from_body(body)),
            render=lambda _: {
                "message": f"Participant with email {email} updated successfully",
                "participant": flatten_body(body),
            },
            failure="Failed to update participant",
            missing_email=email,
        )

    def delete(self, email: str) -> OperationResult:
        return self._execute(
            action="delete_participant",
            statement=lambda: self._repo.delete(email),
            render=lambda _: {"message": f"Participant with email {email} deleted successfully"},
            failure="Failed to delete participant",
            missing_email=email,
        )

    # --- Reads --------------------------------------------------------------------
    def list_all(self) -> OperationResult:
        return self._execute(
            action="list_participants",
            statement=self._repo.list_all,
            render=lambda rows: {"participants": rows},
            failure="Failed to fetch participants",
        )

    def list_summaries(self) -> OperationResult:
        return self._execute(
            action="list_participant_details",
            statement=self._repo.list_summaries,
            render=lambda rows: {"participants": rows},
            failure="Failed to fetch participant details",
        )

    def get_details(self, email: str) -> OperationResult:
        return self._execute(
            action="get_participant_details",
            statement=lambda: self._repo.get_details(email),
            render=lambda row: {"participant": row},
            failure="Failed to fetch participant details",
            missing_email=email,
        )

    def get_work(self, email: str) -> OperationResult:
        return self._execute(
            action="get_participant_work",
            statement=lambda: self._repo.get_work(email),
            render=lambda row: {"work": row},
            failure="Failed to fetch participant work details",
            missing_email=email,
        )

    def get_home(self, email: str) -> OperationResult:
        return self._execute(
            action="get_participant_home",
            statement=lambda: self._repo.get_home(email),
            render=lambda row: {"home": row},
            failure="Failed to fetch participant home details",
            missing_email=email,
        )


__all__ = ["OperationResult", "ParticipantService"]
