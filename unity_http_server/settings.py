from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

GCS_INTEROP_ENDPOINT = "https://storage.googleapis.com"
LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

_SERVER_ALIASES = {
    "host": "UNITY_HTTP_SERVER_HOST",
    "port": "UNITY_HTTP_SERVER_PORT",
    "build_path": "UNITY_HTTP_SERVER_BUILD_PATH",
    "log_level": "UNITY_HTTP_SERVER_LOG_LEVEL",
    "cors_origins": "UNITY_HTTP_SERVER_CORS_ORIGINS",
}


class ServerSettings(BaseSettings):
    """Where to listen and what to serve."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", frozen=True
    )

    host: str = Field(
        default="localhost",
        validation_alias=_SERVER_ALIASES["host"],
    )
    port: int = Field(
        default=8080,
        ge=0,
        le=65535,
        validation_alias=_SERVER_ALIASES["port"],
    )
    build_path: str = Field(
        default="./",
        validation_alias=_SERVER_ALIASES["build_path"],
    )
    log_level: str = Field(
        default="INFO",
        validation_alias=_SERVER_ALIASES["log_level"],
    )
    cors_origins: str = Field(
        default="*",
        validation_alias=_SERVER_ALIASES["cors_origins"],
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            msg = f"unknown log level {value!r}"
            raise ValueError(msg)
        return level

    @property
    def allowed_origins(self) -> list[str]:
        """Comma-separated CORS origins as a list."""
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        return [origin for origin in origins if origin] or ["*"]


class StorageSettings(BaseSettings):
    """Credentials and endpoint of the S3-compatible object store."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", frozen=True
    )

    endpoint: str | None = Field(
        default=None,
        validation_alias="UNITY_HTTP_SERVER_STORAGE_ENDPOINT",
    )
    region: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "UNITY_HTTP_SERVER_STORAGE_REGION",
            "AWS_REGION",
        ),
    )
    access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "UNITY_HTTP_SERVER_STORAGE_ACCESS_KEY_ID",
            "AWS_ACCESS_KEY_ID",
        ),
    )
    secret_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "UNITY_HTTP_SERVER_STORAGE_SECRET_ACCESS_KEY",
            "AWS_SECRET_ACCESS_KEY",
        ),
    )
    session_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "UNITY_HTTP_SERVER_STORAGE_SESSION_TOKEN",
            "AWS_SESSION_TOKEN",
        ),
    )
    addressing_style: Literal["auto", "virtual", "path"] = Field(
        default="auto",
        validation_alias="UNITY_HTTP_SERVER_STORAGE_ADDRESSING_STYLE",
    )

    def endpoint_for(self, scheme: str) -> str | None:
        """Return the endpoint to use for a locator scheme."""
        if self.endpoint:
            return self.endpoint
        if scheme == "gs":
            return GCS_INTEROP_ENDPOINT
        return None


def load_server_settings_from_env(**overrides: object) -> ServerSettings:
    """Load server settings from environment variables.

    Keyword overrides (parsed CLI arguments) take precedence over the
    environment; ``None`` values are ignored.

    Raises:
        ConfigError: if a value fails validation.
    """
    init_kwargs = {
        _SERVER_ALIASES[key]: value
        for key, value in overrides.items()
        if value is not None
    }
    try:
        return ServerSettings(**init_kwargs)
    except ValidationError as exc:
        msg = f"invalid server configuration: {exc}"
        raise ConfigError(msg) from exc


def load_storage_settings_from_env() -> StorageSettings:
    """Load object store settings from environment variables.

    Raises:
        ConfigError: if a value fails validation.
    """
    try:
        return StorageSettings()
    except ValidationError as exc:
        msg = f"invalid storage configuration: {exc}"
        raise ConfigError(msg) from exc
