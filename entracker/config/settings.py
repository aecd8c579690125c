"""Entracker Configuration Settings."""

from __future__ import annotations

import os
from enum import StrEnum
from functools import cached_property, lru_cache
from pathlib import Path

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from entracker.utils.logging import _get_logger

__all__ = ["EntrackerConfig", "LogLevel", "get_config"]

_log = _get_logger(__name__)


def get_data_path() -> Path:
    """Resolve the data directory from `ENTRACKER_DATA_PATH`.

    Returns:
        Path: The absolute data directory.
    """
    return Path(os.getenv("ENTRACKER_DATA_PATH", "./data")).resolve()


def find_yaml_config_file() -> Path:
    """Locate `config.yaml` (or `config.yml`) inside the data path.

    Returns:
        Path: The existing file, or the default `config.yaml` location.
    """
    data_path = get_data_path()
    candidates = [data_path / "config.yaml", data_path / "config.yml"]
    found = next((path for path in candidates if path.exists()), None)
    if found is not None:
        _log.debug(f"Using YAML config file: {found}")
    return found or candidates[0]


class BaseStrEnum(StrEnum):
    """String enumeration matched case-insensitively, printed as its value."""

    @classmethod
    def _missing_(cls, value: object) -> BaseStrEnum | None:
        if not isinstance(value, str):
            return None
        folded = value.casefold()
        return next((m for m in cls if m.value.casefold() == folded), None)

    def __repr__(self) -> str:
        return self.value

    __str__ = __repr__


class LogLevel(BaseStrEnum):
    """Log levels accepted by `LOG_LEVEL`; SUCCESS sits between INFO and WARNING."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EntrackerConfig(BaseSettings):
    """Process-wide settings for the Entracker backend.

    Values come from keyword arguments, then environment variables (e.g.
    `SPREADSHEET_ID`, `TMDB_API_KEY`), then a `.env` file, then
    `config.yaml` in the data path.
    """

    spreadsheet_id: str | None = Field(
        default=None, description="Google spreadsheet holding the media sheets"
    )
    host: str = Field(default="0.0.0.0", description="Host for the web server")
    port: int = Field(default=5000, ge=1, le=65535, description="Web server port")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"], description="Allowed CORS origins"
    )

    tmdb_api_key: SecretStr | None = Field(default=None, description="TMDB API key")
    tmdb_base_url: str = Field(
        default="https://api.themoviedb.org/3", description="TMDB API base URL"
    )

    openai_api_key: SecretStr | None = Field(
        default=None, description="API key of the OpenAI-compatible completion API"
    )
    openai_base_url: str = Field(
        default="https://api.perplexity.ai",
        description="Base URL of the OpenAI-compatible completion API",
    )
    openai_model: str = Field(default="sonar-pro", description="Completion model")

    google_credentials_base64: SecretStr | None = Field(
        default=None,
        description="Base64-encoded service account JSON (takes precedence)",
    )
    google_credentials_path: Path = Field(
        default=Path("credentials.json"),
        description="Service account key file used when no base64 value is set",
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="Logging level for the application"
    )

    @cached_property
    def data_path(self) -> Path:
        """Get the data path for Entracker.

        Returns:
            Path: The data path resolved from the environment or default location.
        """
        return get_data_path()

    @model_validator(mode="after")
    def warn_missing_integrations(self) -> EntrackerConfig:
        """Warn about integrations that will fail at request time.

        Missing keys are not fatal at startup; the affected endpoints report a
        configuration error instead.

        Returns:
            EntrackerConfig: Self, unchanged.
        """
        if not self.spreadsheet_id:
            _log.warning("SPREADSHEET_ID is not set; sheet operations will fail")
        if self.tmdb_api_key is None:
            _log.warning("TMDB_API_KEY is not set; metadata lookups will fail")
        if self.openai_api_key is None:
            _log.warning("OPENAI_API_KEY is not set; AI enrichment will fail")
        return self

    def __str__(self) -> str:
        """Creates a human-readable representation of the configuration.

        Returns:
            str: Configuration summary without secrets.
        """
        credentials = (
            "base64" if self.google_credentials_base64 else self.google_credentials_path
        )
        return (
            f"Entracker Config: SPREADSHEET_ID: {self.spreadsheet_id}, "
            f"CREDENTIALS: {credentials}, MODEL: {self.openai_model}, "
            f"DATA_PATH: {self.data_path}, LOG_LEVEL: {self.log_level}"
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of configuration sources."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=find_yaml_config_file()),
        )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


@lru_cache(maxsize=1)
def get_config() -> EntrackerConfig:
    """Get the singleton instance of EntrackerConfig.

    Returns:
        EntrackerConfig: The singleton configuration instance.
    """
    return EntrackerConfig()
