"""Application settings powered by ``pydantic-settings``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal, Sequence

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .. import __version__ as package_version

PACKAGE_DIR = Path(__file__).resolve().parent.parent
REPOSITORY_ROOT = PACKAGE_DIR.parent.parent

EnvironmentName = Literal["development", "test", "ci"]

_ENVIRONMENT_ALIASES: dict[str, EnvironmentName] = {
    "development": "development",
    "dev": "development",
    "test": "test",
    "testing": "test",
    "ci": "ci",
}

_ENVIRONMENT_PROFILES: dict[EnvironmentName, dict[str, Any]] = {
    "development": {
        "log_level": "DEBUG",
        "reload": True,
        "db_echo": False,
        "create_schema_on_startup": True,
        "seed_on_startup": True,
    },
    "test": {
        "log_level": "WARNING",
        "reload": False,
        "db_echo": False,
        "create_schema_on_startup": False,
        "seed_on_startup": False,
    },
    "ci": {
        "log_level": "INFO",
        "reload": False,
        "db_echo": False,
        "create_schema_on_startup": True,
        "seed_on_startup": False,
    },
}


class Settings(BaseSettings):
    """Runtime configuration for the task management service."""

    model_config = SettingsConfigDict(
        env_prefix="TASKMANAGER_",
        env_file=(REPOSITORY_ROOT / ".env",),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "Task Management API"
    environment: EnvironmentName = Field(default="development")
    api_prefix: str = Field(default="/api")
    version: str = Field(default=package_version)
    database_url: str = Field(default="sqlite+aiosqlite:///./taskmanager.db")
    cors_allow_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: ["http://localhost:4200", "https://localhost:4200"],
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    cors_allow_headers: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000)
    log_level: str = Field(default="INFO")
    reload: bool = Field(default=True)
    db_echo: bool = Field(default=False)
    create_schema_on_startup: bool = Field(default=True)
    seed_on_startup: bool = Field(default=True)

    jwt_secret_key: str = Field(default="change-me-to-a-long-random-secret-value")
    jwt_algorithm: str = Field(default="HS256")
    jwt_issuer: str = Field(default="TaskManagementAPI")
    jwt_audience: str = Field(default="TaskManagementClient")
    access_token_expire_minutes: int = Field(default=60 * 24)

    session_secret_key: str = Field(default="change-me-session")
    session_cookie_name: str = Field(default="taskmanager_session")
    session_max_age: int | None = Field(default=60 * 60 * 24)
    session_https_only: bool = Field(default=False)
    session_same_site: str = Field(default="lax")

    @field_validator("environment", mode="before")
    @classmethod
    def _normalise_environment(cls, value: object) -> EnvironmentName:
        if isinstance(value, str):
            normalized = value.strip().lower()
        else:
            normalized = ""
        return _ENVIRONMENT_ALIASES.get(normalized, "development")

    @field_validator(
        "cors_allow_origins",
        "cors_allow_methods",
        "cors_allow_headers",
        mode="before",
    )
    @classmethod
    def _coerce_comma_separated(cls, value: object) -> list[str]:
        """Allow comma separated strings for CORS configuration."""

        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Sequence):
            return [str(item) for item in value if str(item).strip()]
        return []

    @field_validator("access_token_expire_minutes", mode="before")
    @classmethod
    def _ensure_positive_expiry(cls, value: object) -> int:
        try:
            minutes = int(value)
        except (TypeError, ValueError):
            return 60 * 24
        return max(minutes, 0)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_log_level(cls, value: object) -> str:
        if not isinstance(value, str):
            return "INFO"
        return value.upper()

    @field_validator("session_same_site", mode="before")
    @classmethod
    def _normalize_same_site(cls, value: object) -> str:
        if not isinstance(value, str):
            return "lax"
        normalized = value.lower()
        if normalized not in {"lax", "strict", "none"}:
            return "lax"
        return normalized

    @model_validator(mode="after")
    def _apply_environment_profile(self) -> "Settings":
        profile = _ENVIRONMENT_PROFILES[self.environment]
        fields_set = set(getattr(self, "model_fields_set", set()))
        for field_name, value in profile.items():
            if field_name not in fields_set:
                setattr(self, field_name, value)
        return self


@lru_cache()
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    return Settings()


__all__ = ["EnvironmentName", "Settings", "get_settings"]
