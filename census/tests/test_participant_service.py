"""
ParticipantService outcome mapping.

Why:
    Every endpoint shares one error-to-status mapping; pin it once here with a
    repo double instead of going through HTTP.
"""
from __future__ import annotations

import copy

import pytest

from census.participants.errors import StorageError
from census.participants.repo_db import DBParticipantRepo
from census.participants.service import ParticipantService
from census.storage.pool import Database
from census.web.routes.participants import _Repo

from utils.fake_psycopg import FakePool


BODY = {
    "participant": {"email": "a@b.com", "firstname": "Ann", "lastname": "Lee", "dob": "1990-05-12"},
    "work": {"companyname": "Acme", "salary": 50000, "currency": "USD"},
    "home": {"country": "US", "city": "Boston"},
}


class _FailingRepo:
    """Every storage call fails; records whether any was attempted."""

    def __init__(self) -> None:
        self.calls = 0

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            self.calls += 1
            raise StorageError("connection refused")

        return _fail


@pytest.fixture
def service() -> ParticipantService:
    return ParticipantService(_Repo())


def test_create_returns_201_with_flat_echo(service: ParticipantService):
    result = service.create(BODY)
    assert result.status_code == 201
    assert result.body == {
        "message": "Participant added successfully",
        "participant": {
            "email": "a@b.com",
            "firstname": "Ann",
            "lastname": "Lee",
            "dob": "1990-05-12",
            "companyname": "Acme",
            "salary": 50000,
            "currency": "USD",
            "country": "US",
            "city": "Boston",
        },
    }


def test_duplicate_create_is_a_client_error_and_keeps_first_record(service: ParticipantService):
    service.create(BODY)
    second = copy.deepcopy(BODY)
    second["participant"]["lastname"] = "Other"
    second["work"]["salary"] = 1
    result = service.create(second)
    assert result.status_code == 400
    assert result.body == {"error": "Participant with email a@b.com already exists"}
    assert service.get_details("a@b.com").body["participant"]["lastname"] == "Lee"
    assert service.get_work("a@b.com").body["work"]["salary"] == 50000


def test_long_valid_email_is_stored_through_db_repo():
    pool = FakePool()
    service = ParticipantService(DBParticipantRepo(Database(pool=pool)))
    body = copy.deepcopy(BODY)
    body["participant"]["email"] = "a" * 320 + "@b.com"
    result = service.create(body)
    assert result.status_code == 201
    assert body["participant"]["email"] in pool.participants


def test_precise_salary_is_kept_exactly(service: ParticipantService):
    body = copy.deepcopy(BODY)
    body["work"]["salary"] = "0.125"
    service.create(body)
    assert service.get_work("a@b.com").body["work"]["salary"] == 0.125


def test_validation_failure_never_reaches_storage():
    repo = _FailingRepo()
    result = ParticipantService(repo).create({"participant": {}})
    assert result.status_code == 400
    assert result.body["error"] == "Validation failed"
    assert result.body["details"] == ['Missing "work" object', 'Missing "home" object']
    assert repo.calls == 0


def test_update_requires_matching_email_before_storage():
    repo = _FailingRepo()
    result = ParticipantService(repo).update("other@b.com", BODY)
    assert result.status_code == 400
    assert result.body == {"error": "Email in URL and body must match"}
    assert repo.calls == 0


def test_update_and_delete_of_unknown_email_are_404(service: ParticipantService):
    assert service.update("a@b.com", BODY).status_code == 404
    result = service.delete("a@b.com")
    assert result.status_code == 404
    assert result.body == {"error": "Participant with email a@b.com not found"}


def test_update_replaces_all_fields(service: ParticipantService):
    service.create(BODY)
    changed = copy.deepcopy(BODY)
    changed["home"]["city"] = "Paris"
    changed["work"]["salary"] = "60000"
    result = service.update("a@b.com", changed)
    assert result.status_code == 200
    assert result.body["message"] == "Participant with email a@b.com updated successfully"
    assert result.body["participant"]["salary"] == "60000"
    assert service.get_home("a@b.com").body == {"home": {"country": "US", "city": "Paris"}}
    assert service.get_work("a@b.com").body["work"]["salary"] == 60000


def test_reads_of_unknown_email_are_404(service: ParticipantService):
    for op in (service.get_details, service.get_work, service.get_home):
        assert op("x@y.com").status_code == 404


def test_empty_lists_are_ok(service: ParticipantService):
    assert service.list_all().body == {"participants": []}
    assert service.list_summaries().body == {"participants": []}


@pytest.mark.parametrize(
    "call, message",
    [
        (lambda s: s.create(BODY), "Failed to add participant"),
        (lambda s: s.list_all(), "Failed to fetch participants"),
        (lambda s: s.list_summaries(), "Failed to fetch participant details"),
        (lambda s: s.get_details("a@b.com"), "Failed to fetch participant details"),
        (lambda s: s.get_work("a@b.com"), "Failed to fetch participant work details"),
        (lambda s: s.get_home("a@b.com"), "Failed to fetch participant home details"),
        (lambda s: s.update("a@b.com", BODY), "Failed to update participant"),
        (lambda s: s.delete("a@b.com"), "Failed to delete participant"),
    ],
)
def test_storage_failures_map_to_500_with_operation_message(call, message):
    result = call(ParticipantService(_FailingRepo()))
    assert result.status_code == 500
    assert result.body == {"error": message}
