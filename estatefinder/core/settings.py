"""Estatefinder application settings loaded from environment and ``.env`` files.

Uses :mod:`pydantic_settings` to parse environment variables (and optionally
an ``.env`` file) into a validated settings object.  The field name is the
**lowercase** version of the env-var name (e.g. ``API_BASE_URL`` →
``api_base_url``).

Typical usage::

    from estatefinder.core.settings import Settings

    settings = Settings()              # loads from env + .env
    tz = settings.display_tz           # zoneinfo.ZoneInfo
"""

from __future__ import annotations

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from estatefinder.core.exceptions import ConfigError

__all__ = ["Settings", "load_settings"]

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Central application configuration.

    Values are loaded in priority order:

    1. Actual environment variables (highest priority).
    2. ``.env`` file in the working directory.
    3. Field defaults (lowest priority).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Listing service
    # ------------------------------------------------------------------
    api_base_url: str = Field(
        default="http://localhost:8080",
        min_length=1,
        description="Base URL of the listing service.",
    )
    api_connect_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="TCP connect timeout in seconds.",
    )
    api_read_timeout: float = Field(
        default=20.0,
        gt=0.0,
        description="Read timeout in seconds.",
    )
    api_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Total attempts per request, including the first.",
    )

    # ------------------------------------------------------------------
    # Query policy
    # ------------------------------------------------------------------
    default_limit: int = Field(
        default=0,
        ge=0,
        description=(
            "Limit used when a caller passes a non-positive one "
            "(0 = send no limit at all)."
        ),
    )

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    display_timezone: str = Field(
        default="UTC",
        description="IANA timezone used to render sale dates and times.",
    )
    maps_base_url: str = Field(
        default="https://www.google.com/maps/dir/",
        min_length=1,
        description="Directions endpoint of the mapping service.",
    )
    detail_route_prefix: str = Field(
        default="/sales",
        description="Path prefix of the internal listing detail route.",
    )

    # ------------------------------------------------------------------
    # Runtime flags
    # ------------------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level.")
    log_format: str = Field(default="text", description="Log format: 'text' or 'json'.")

    # ------------------------------------------------------------------
    # Field validators
    # ------------------------------------------------------------------

    @field_validator("api_base_url", "maps_base_url")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL must not be blank")
        return v

    @field_validator("display_timezone")
    @classmethod
    def _validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"display_timezone {v!r} is not a known IANA zone") from exc
        return v

    @field_validator("detail_route_prefix")
    @classmethod
    def _normalise_prefix(cls, v: str) -> str:
        return "/" + v.strip().strip("/")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of {allowed}, got {v!r}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, v: str) -> str:
        allowed = {"text", "json"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"log_format must be one of {allowed}, got {v!r}")
        return v_lower

    # ------------------------------------------------------------------
    # Derived helpers
    # ------------------------------------------------------------------

    @property
    def display_tz(self) -> ZoneInfo:
        """Return :attr:`display_timezone` as a :class:`~zoneinfo.ZoneInfo`."""
        return ZoneInfo(self.display_timezone)


def load_settings(**overrides: object) -> Settings:
    """Build :class:`Settings`, reporting invalid values as :class:`ConfigError`.

    Keyword *overrides* take precedence over the environment and ``.env``.
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(f"Invalid configuration: {problems}") from exc
