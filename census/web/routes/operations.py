"""Operations endpoints (diagnostics for administrators)."""

from __future__ import annotations

import logging
from typing import Any, Optional

import psycopg
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

operations_router = APIRouter(tags=["Operations"])
logger = logging.getLogger("census.web.operations")

_DATABASE: Optional[Any] = None


def set_database(db: Any) -> None:
    """Inject the object exposing `probe()` (the app's `Database`, or a fake in tests)."""
    global _DATABASE
    _DATABASE = db


def _private_response(body: dict, *, status_code: int) -> JSONResponse:
    return JSONResponse(body, status_code=status_code, headers={"Cache-Control": "private, no-store"})


@operations_router.get("/db-test")
async def db_test(request: Request):
    """
    Check database reachability with a trivial query.

    Behavior:
        - 200 {"db": "connected", "result": {"ok": 1}}
        - 500 {"error": "Database connection failed", "details": <driver message>}

    Permissions:
        Caller must pass the Basic credential gate like any other admin route.
    """
    if _DATABASE is None:
        return _private_response(
            {"error": "Database connection failed", "details": "database not configured"}, status_code=500
        )
    try:
        result = await run_in_threadpool(_DATABASE.probe)
    except psycopg.Error as exc:
        logger.warning("DB probe failed: %s", exc.__class__.__name__)
        return _private_response({"error": "Database connection failed", "details": str(exc)}, status_code=500)
    return _private_response({"db": "connected", "result": result}, status_code=200)
