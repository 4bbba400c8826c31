from __future__ import annotations

from taskmanager.core.config import Settings


def test_environment_profiles_apply_defaults() -> None:
    dev = Settings(environment="development")
    assert dev.environment == "development"
    assert dev.log_level == "DEBUG"
    assert dev.reload is True
    assert dev.create_schema_on_startup is True
    assert dev.seed_on_startup is True

    test_profile = Settings(environment="test")
    assert test_profile.environment == "test"
    assert test_profile.log_level == "WARNING"
    assert test_profile.reload is False
    assert test_profile.seed_on_startup is False

    ci_profile = Settings(environment="ci")
    assert ci_profile.environment == "ci"
    assert ci_profile.log_level == "INFO"
    assert ci_profile.create_schema_on_startup is True
    assert ci_profile.seed_on_startup is False


def test_environment_aliases_are_normalised() -> None:
    assert Settings(environment="DEV").environment == "development"
    assert Settings(environment="testing").environment == "test"
    assert Settings(environment="unknown").environment == "development"


def test_environment_profile_respects_explicit_overrides(monkeypatch) -> None:
    monkeypatch.setenv("TASKMANAGER_LOG_LEVEL", "error")
    overridden = Settings(environment="test")
    assert overridden.log_level == "ERROR"

    monkeypatch.setenv("TASKMANAGER_SEED_ON_STARTUP", "true")
    assert Settings(environment="test").seed_on_startup is True


def test_cors_origins_accept_comma_separated_values(monkeypatch) -> None:
    monkeypatch.setenv("TASKMANAGER_CORS_ALLOW_ORIGINS", "http://a.example, http://b.example")

    settings = Settings(environment="test")
    assert settings.cors_allow_origins == ["http://a.example", "http://b.example"]


def test_token_defaults() -> None:
    settings = Settings(environment="test")

    assert settings.access_token_expire_minutes == 24 * 60
    assert settings.jwt_issuer == "TaskManagementAPI"
    assert settings.jwt_audience == "TaskManagementClient"
    assert settings.jwt_algorithm == "HS256"
