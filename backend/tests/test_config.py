import logging

import pydantic
import pytest

from usergate.core.config import DEV_JWT_SECRET, Settings

from .conftest import TEST_SECRET, build_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("JWT_SECRET", "APP_ENV", "DATABASE_URL", "POSTGRES_URL", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)


def test_production_requires_secret():
    with pytest.raises(pydantic.ValidationError, match="JWT_SECRET is required in production"):
        Settings(_env_file=None, app_env="production")


def test_short_secret_is_rejected():
    with pytest.raises(pydantic.ValidationError, match="at least 32 characters"):
        Settings(_env_file=None, jwt_secret="too-short")


def test_development_falls_back_to_dev_secret_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="usergate.core.config"):
        cfg = Settings(_env_file=None, app_env="development")

    assert cfg.jwt_secret == DEV_JWT_SECRET
    assert any("JWT_SECRET is not set" in r.getMessage() for r in caplog.records)


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("APP_ENV", "Production")
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("POSTGRES_URL", "postgresql://u:p@db/usergate")

    cfg = Settings(_env_file=None)

    assert cfg.is_production
    assert cfg.jwt_secret == TEST_SECRET
    assert cfg.database_url == "postgresql://u:p@db/usergate"


def test_settings_are_frozen():
    cfg = build_settings()
    with pytest.raises(pydantic.ValidationError):
        cfg.jwt_secret = "z" * 40


def test_cookie_max_age_is_seven_days():
    assert build_settings().cookie_max_age == 7 * 24 * 60 * 60


def test_cors_allowlist():
    cfg = build_settings(cors_origins="https://a.example.com, https://b.example.com,")
    assert cfg.allow_origins == ["https://a.example.com", "https://b.example.com"]

    cfg = build_settings(frontend_url="https://app.example.com")
    assert cfg.allow_origins == ["http://localhost:3000", "https://app.example.com"]
