"""
Pytest configuration for census tests.

Why: Force AnyIO to use the asyncio backend and give every test a fresh
in-memory participant repo and admin gate, so API tests never depend on a
running Postgres. Live-database tests skip themselves via `utils.db`.
"""
import os
import sys
from pathlib import Path

import pytest

# Ensure the repo root and the tests dir are importable across tests
REPO_ROOT = Path(__file__).resolve().parents[2]
TESTS_DIR = REPO_ROOT / "census" / "tests"
for p in (str(REPO_ROOT), str(TESTS_DIR)):
    if p not in sys.path:
        sys.path.insert(0, p)

from utils.auth import basic_header  # noqa: E402

# The app module runs its startup guard at import time; keep it in dev mode.
os.environ.pop("CENSUS_ENV", None)

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "secret123"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def admin_headers() -> dict:
    return basic_header(ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture(autouse=True)
def _reset_participant_repo():
    """Install a fresh in-memory participant repo for each test."""
    import census.web.routes.participants as participants

    participants.set_repo(participants._Repo())
    yield


@pytest.fixture(autouse=True)
def _reset_admin_gate():
    """Install a gate backed by one known admin; tests may swap it."""
    import census.web.main as main
    from census.identity_access.basic_auth import BasicAuthGate
    from census.identity_access.stores import InMemoryAdminStore

    main.set_gate(BasicAuthGate(InMemoryAdminStore([(ADMIN_USERNAME, ADMIN_PASSWORD)])))
    yield


@pytest.fixture(autouse=True)
def _clear_env_toggles(monkeypatch: pytest.MonkeyPatch):
    """Clear env-driven toggles that may leak across tests."""
    for var in (
        "CENSUS_ENV",
        "DATABASE_URL",
        "DB_HOST",
        "DB_PORT",
        "DB_USER",
        "DB_PASSWORD",
        "DB_NAME",
        "DB_POOL_MIN_SIZE",
        "DB_POOL_MAX_SIZE",
        "DB_POOL_TIMEOUT",
        "AUTO_CREATE_SCHEMA",
        "ADMIN_PASSWORD_COMPARE",
    ):
        monkeypatch.delenv(var, raising=False)
    yield
