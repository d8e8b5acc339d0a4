"Census API"
from __future__ import annotations

import logging
import os
import sys
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool


def _under_pytest() -> bool:
    return "pytest" in sys.modules or bool(os.getenv("PYTEST_CURRENT_TEST"))


def _should_load_dotenv() -> bool:
    """Decide if we should load a local .env file.

    - Never load under pytest; tests provide their own env.
    - Allow explicit opt-out via CENSUS_ENABLE_DOTENV (default true outside pytest).
    """
    if _under_pytest():
        return False
    flag = (os.getenv("CENSUS_ENABLE_DOTENV", "true") or "").strip().lower()
    return flag in ("1", "true", "yes")


if _should_load_dotenv():
    load_dotenv()

from census.identity_access.basic_auth import BasicAuthGate, matcher_from_env
from census.identity_access.domain import AuthError
from census.identity_access.stores import InMemoryAdminStore
from census.identity_access.stores_db import DBAdminStore
from census.participants.repo_db import DBParticipantRepo
from census.storage.bootstrap import ensure_schema_from_env
from census.storage.pool import Database
from census.web import config as _cfg
from census.web.routes import operations
from census.web.routes import participants
from census.web.routes.operations import operations_router
from census.web.routes.participants import participants_router

# Minimal production safety checks (fail-fast on insecure config)
_cfg.ensure_secure_config_on_startup()

logger = logging.getLogger("census.identity_access")

# --- Storage & Gate Setup -------------------------------------------------------

DATABASE = Database()
operations.set_database(DATABASE)

if _under_pytest():
    # Tests install their own admins via set_gate().
    ADMIN_GATE = BasicAuthGate(InMemoryAdminStore(), matcher_from_env())
else:
    ADMIN_GATE = BasicAuthGate(DBAdminStore(DATABASE), matcher_from_env())


def set_gate(gate: BasicAuthGate) -> None:
    global ADMIN_GATE
    ADMIN_GATE = gate


@asynccontextmanager
async def lifespan(app: FastAPI):
    DATABASE.open()
    participants.set_repo(DBParticipantRepo(DATABASE))
    ensure_schema_from_env(DATABASE)
    try:
        yield
    finally:
        DATABASE.close()


app = FastAPI(
    title="Census API",
    description="Administrative CRUD for census participants",
    version="0.1.0",
    lifespan=lifespan,
)

# --- Auth Middleware ------------------------------------------------------------

WWW_AUTHENTICATE = 'Basic realm="census"'


def _is_public_path(path: str) -> bool:
    return path == "/"


@app.middleware("http")
async def credential_gate(request: Request, call_next):
    if _is_public_path(request.url.path):
        return await call_next(request)

    try:
        admin = await run_in_threadpool(ADMIN_GATE.authenticate, request.headers.get("authorization"))
    except AuthError as exc:
        headers = {"Cache-Control": "private, no-store"}
        if exc.status_code == 401:
            headers["WWW-Authenticate"] = WWW_AUTHENTICATE
        logger.info("Auth rejected: kind=%s path=%s", exc.kind, request.url.path)
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code, headers=headers)

    # Expose minimal, read-only admin context for downstream handlers.
    request.state.admin = {"id": admin.id, "username": admin.username}
    return await call_next(request)


@app.middleware("http")
async def security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    return response


# --- Routes ---------------------------------------------------------------------

@app.get("/")
async def root():
    """Liveness message; the only endpoint reachable without credentials."""
    return {"message": "Census API is running"}


app.include_router(participants_router)
app.include_router(operations_router)


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL", "INFO") or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(
        "census.web.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
    )


if __name__ == "__main__":  # pragma: no cover
    run()
