"""
Participants API routes.

Why:
    Expose create/read/update/delete for participant records. Authentication
    happens in the credential-gate middleware before any handler runs; handlers
    only parse the request, delegate to `ParticipantService`, and turn its
    `OperationResult` into a JSON response.

Notes:
    - Persistence: the app lifespan injects the Postgres-backed repo via
      `set_repo`. Until then (and in tests) an in-memory repo with the same
      semantics is used, except in prod-like environments where every
      operation fails with a storage error. Tests call `set_repo` to isolate state.
    - Blocking storage calls run in the threadpool so the event loop stays free.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from census.participants.domain import (
    COLUMNS,
    DETAIL_COLUMNS,
    HOME_COLUMNS,
    SUMMARY_COLUMNS,
    WORK_COLUMNS,
    ParticipantRecord,
    row_to_dict,
)
from census.participants.errors import DuplicateKeyError, StorageError
from census.participants.service import OperationResult, ParticipantService
from census.participants.storage import ParticipantRepoProtocol
from census.web.config import _is_prod_like, current_environment

participants_router = APIRouter(tags=["Participants"])  # explicit paths below
logger = logging.getLogger("census.web.participants")


# --- In-memory persistence (dev/tests) ------------------------------------------

class _Repo:
    def __init__(self) -> None:
        self.participants: Dict[str, ParticipantRecord] = {}

    def _row(self, email: str, columns: tuple) -> Optional[Dict[str, Any]]:
        rec = self.participants.get(email)
        if rec is None:
            return None
        # companyName is the projected alias of companyname
        values = tuple(getattr(rec, c if c != "companyName" else "companyname") for c in columns)
        return row_to_dict(values, columns)

    def insert(self, record: ParticipantRecord) -> None:
        if record.email in self.participants:
            raise DuplicateKeyError(record.email)
        self.participants[record.email] = record

    def list_all(self) -> List[Dict[str, Any]]:
        return [self._row(email, COLUMNS) for email in sorted(self.participants)]

    def list_summaries(self) -> List[Dict[str, Any]]:
        return [self._row(email, SUMMARY_COLUMNS) for email in sorted(self.participants)]

    def get_details(self, email: str) -> Optional[Dict[str, Any]]:
        return self._row(email, DETAIL_COLUMNS)

    def get_work(self, email: str) -> Optional[Dict[str, Any]]:
        return self._row(email, WORK_COLUMNS)

    def get_home(self, email: str) -> Optional[Dict[str, Any]]:
        return self._row(email, HOME_COLUMNS)

    def update(self, email: str, record: ParticipantRecord) -> int:
        if email not in self.participants:
            return 0
        self.participants[email] = record
        return 1

    def delete(self, email: str) -> int:
        return 1 if self.participants.pop(email, None) is not None else 0


class _UnwiredRepo:
    """Refuses every call; used when no repo was injected in a prod-like environment."""

    def __getattr__(self, name: str):
        def _refuse(*args, **kwargs):
            raise StorageError("participant repository is not wired")

        return _refuse


_REPO: Optional[ParticipantRepoProtocol] = None


def _get_repo() -> ParticipantRepoProtocol:
    global _REPO
    if _REPO is None:
        if _is_prod_like(current_environment()):
            logger.error("Participant repo not wired; refusing in-memory fallback in %s", current_environment())
            return _UnwiredRepo()
        logger.warning("Participant repo not wired; using in-memory fallback")
        _REPO = _Repo()
    return _REPO


def set_repo(repo: ParticipantRepoProtocol) -> None:
    """Swap the participant repository (app lifespan and tests)."""
    global _REPO
    _REPO = repo


def _service() -> ParticipantService:
    return ParticipantService(_get_repo())


def _json_private(result: OperationResult) -> JSONResponse:
    """Return the operation result with caching disabled.

    Participant data is personal; keep it out of shared caches.
    """
    return JSONResponse(
        content=result.body,
        status_code=result.status_code,
        headers={"Cache-Control": "private, no-store"},
    )


async def _read_json_body(request: Request) -> Any:
    """Return the parsed JSON body, or None when it is missing or malformed.

    A None body fails validation with a 400 like any other non-object body.
    """
    try:
        return await request.json()
    except ValueError:
        return None


def _admin_name(request: Request) -> str:
    admin = getattr(request.state, "admin", None) or {}
    return str(admin.get("username", "")) if isinstance(admin, dict) else ""


# --- Routes ----------------------------------------------------------------------

@participants_router.post("/participants/add")
async def create_participant(request: Request):
    """Create a participant from a nested body.

    Behavior:
        - 201 with the submitted record echoed back
        - 400 with `details` when validation fails
        - 400 when the email already exists
        - 500 on storage failure
    """
    body = await _read_json_body(request)
    result = await run_in_threadpool(_service().create, body)
    if result.status_code == 201:
        logger.info("Participant created by admin=%s", _admin_name(request))
    return _json_private(result)


@participants_router.get("/participants")
async def list_participants(request: Request):
    """List all participants with every column. No pagination."""
    return _json_private(await run_in_threadpool(_service().list_all))


@participants_router.get("/participants/details")
async def list_participant_details(request: Request):
    """List first name, last name and email of every participant."""
    return _json_private(await run_in_threadpool(_service().list_summaries))


@participants_router.get("/participants/details/{email}")
async def get_participant_details(request: Request, email: str):
    """Personal details (firstname, lastname, dob) of one participant; 404 when unknown."""
    return _json_private(await run_in_threadpool(_service().get_details, email))


@participants_router.get("/participants/work/{email}")
async def get_participant_work(request: Request, email: str):
    return _json_private(await run_in_threadpool(_service().get_work, email))


@participants_router.get("/participants/home/{email}")
async def get_participant_home(request: Request, email: str):
    return _json_private(await run_in_threadpool(_service().get_home, email))


@participants_router.put("/participants/{email}")
async def update_participant(request: Request, email: str):
    """Replace every field of a participant (no partial updates).

    Behavior:
        - 200 with the submitted record echoed back
        - 400 on validation failure or when body email differs from the path
        - 404 when no participant has this email
        - 500 on storage failure
    """
    body = await _read_json_body(request)
    result = await run_in_threadpool(_service().update, email, body)
    if result.status_code == 200:
        logger.info("Participant updated by admin=%s", _admin_name(request))
    return _json_private(result)


@participants_router.delete("/participants/{email}")
async def delete_participant(request: Request, email: str):
    result = await run_in_threadpool(_service().delete, email)
    if result.status_code == 200:
        logger.info("Participant deleted by admin=%s", _admin_name(request))
    return _json_private(result)
