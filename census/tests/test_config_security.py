"""
Startup security guard tests.

Validates that production/staging environments fail fast on insecure
database or credential settings while development stays permissive.
"""
from __future__ import annotations

import pytest

from census.web import config as cfg


def _secure_prod(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CENSUS_ENV", "prod")
    monkeypatch.setenv("DATABASE_URL", "postgresql://census_app:S3cure-Pass@db:5432/census?sslmode=require")


def test_dev_allows_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CENSUS_ENV", "dev")
    monkeypatch.setenv("AUTO_CREATE_SCHEMA", "true")
    cfg.ensure_secure_config_on_startup()


def test_prod_with_secure_settings_passes(monkeypatch: pytest.MonkeyPatch):
    _secure_prod(monkeypatch)
    cfg.ensure_secure_config_on_startup()


def test_prod_requires_a_database_source(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CENSUS_ENV", "production")
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()


def test_prod_rejects_sslmode_disable(monkeypatch: pytest.MonkeyPatch):
    _secure_prod(monkeypatch)
    monkeypatch.setenv("DATABASE_URL", "postgresql://census_app:S3cure-Pass@db:5432/census?sslmode=disable")
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()


@pytest.mark.parametrize(
    "dsn",
    [
        "postgresql://census:census@db:5432/census",
        "postgresql://census@db:5432/census",
        "host=db user=census password=census dbname=census",
    ],
)
def test_prod_rejects_default_or_missing_password(monkeypatch: pytest.MonkeyPatch, dsn: str):
    monkeypatch.setenv("CENSUS_ENV", "staging")
    monkeypatch.setenv("DATABASE_URL", dsn)
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()


def test_prod_with_db_parts_needs_real_password(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CENSUS_ENV", "prod")
    monkeypatch.setenv("DB_HOST", "db")
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()
    monkeypatch.setenv("DB_PASSWORD", "S3cure-Pass")
    cfg.ensure_secure_config_on_startup()


def test_prod_rejects_unknown_compare_mode(monkeypatch: pytest.MonkeyPatch):
    _secure_prod(monkeypatch)
    monkeypatch.setenv("ADMIN_PASSWORD_COMPARE", "bcrypt")
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()


def test_prod_rejects_auto_create_schema(monkeypatch: pytest.MonkeyPatch):
    _secure_prod(monkeypatch)
    monkeypatch.setenv("AUTO_CREATE_SCHEMA", "true")
    with pytest.raises(SystemExit):
        cfg.ensure_secure_config_on_startup()
