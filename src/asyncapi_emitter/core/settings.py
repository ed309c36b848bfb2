"""
Centralized settings for the AsyncAPI emitter.

Manifesto:
    One validated, cached settings object for every emission run. Values
    come from ``ASYNCAPI_EMITTER_*`` environment variables only; reading
    configuration files belongs to the surrounding tooling.

Tags:
    asyncapi-emitter, configuration, settings, pydantic, caching, validation

Doc-Types:
    api-reference
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from asyncapi_emitter.core.errors import InvalidConfigError

SUPPORTED_MAJOR_VERSION = "3"


class EmitterSettings(BaseSettings):
    """Emitter configuration.

    All fields can be set via ``ASYNCAPI_EMITTER_*`` environment variables
    (e.g. ``ASYNCAPI_EMITTER_TITLE="Orders API"``).
    """

    model_config = SettingsConfigDict(
        env_prefix="ASYNCAPI_EMITTER_",
        extra="ignore",
    )

    # ── Document ─────────────────────────────────────────────────
    asyncapi_version: str = Field(default="3.0.0", description="AsyncAPI document version (3.x only)")
    title: str = Field(default="AsyncAPI")
    api_version: str = Field(default="1.0.0")
    description: str | None = Field(default=None)
    default_content_type: str = Field(default="application/json")

    # ── Servers ──────────────────────────────────────────────────
    default_server_protocol: str = Field(default="kafka")

    # ── Execution ────────────────────────────────────────────────
    max_concurrency: int | None = Field(
        default=None,
        description="Per-service bound on concurrent conversions (None = unbounded)",
    )

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("asyncapi_version")
    @classmethod
    def _check_version(cls, value: str) -> str:
        major = value.split(".", 1)[0]
        if major != SUPPORTED_MAJOR_VERSION or value.count(".") != 2:
            raise ValueError(f"Unsupported AsyncAPI version {value!r}; expected 3.x.y")
        return value

    @field_validator("max_concurrency")
    @classmethod
    def _check_concurrency(cls, value: int | None) -> int | None:
        if value is not None and value < 1:
            raise ValueError("max_concurrency must be >= 1")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level {value!r}")
        return value

    @property
    def json_logs(self) -> bool:
        return self.log_format.lower() == "json"


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, EmitterSettings] = {}


def get_settings(*, _force_reload: bool = False) -> EmitterSettings:
    """Load, validate, and cache an :class:`EmitterSettings` instance.

    Parameters
    ----------
    _force_reload:
        Bypass cache and re-read the environment.
    """
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    try:
        settings = EmitterSettings()
    except ValidationError as e:
        first = e.errors()[0]
        key = ".".join(str(part) for part in first.get("loc", ())) or "settings"
        raise InvalidConfigError(key, first.get("input"), f"Invalid emitter setting {key}: {first.get('msg')}") from e
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
