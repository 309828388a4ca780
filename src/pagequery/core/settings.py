"""Settings for pagequery.

Host-level configuration the pipeline needs but never reads ambiently: the
name of a namespace's start page, the identifier separator, the general
display date format and the timezone used to turn raw timestamps into
calendar values.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    The pipeline receives settings through a ``QueryContext`` rather than
    reaching for globals, so two concurrent queries can run with different
    configurations.

    - **Pydantic validation:** Type-checked at startup, not runtime
    - **Environment-driven:** Reads ``PAGEQUERY_*`` env vars and ``.env`` files
    - **Sensible defaults:** Works out of the box (DokuWiki conventions)

Examples:
    >>> from pagequery.core.settings import PagequerySettings
    >>> PagequerySettings(start_page="index").start_page
    'index'

Tags:
    settings, configuration, pydantic, environment, pagequery
"""

from __future__ import annotations

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PagequerySettings(BaseSettings):
    """Settings shared by every query run.

    Fields
    ──────
    start_page   : Name of a namespace's start/index page
    separator    : Identifier path separator
    date_format  : strftime format for dates rendered in display templates
    timezone     : IANA zone for timestamp formatting and filter date parsing
    log_level    : Structlog log level
    log_format   : ``console`` or ``json``
    """

    model_config = SettingsConfigDict(
        env_prefix="PAGEQUERY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Corpus conventions ───────────────────────────────────────
    start_page: str = Field(default="start", min_length=1)
    separator: str = Field(default=":", min_length=1, max_length=1)

    # ── Dates ────────────────────────────────────────────────────
    date_format: str = Field(default="%d %b %Y")
    timezone: str = Field(default="UTC")

    # ── Observability ────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_format")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("console", "json"):
            raise ValueError("log_format must be 'console' or 'json'")
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


_settings_cache: dict[str, PagequerySettings] = {}


def get_settings(*, _force_reload: bool = False) -> PagequerySettings:
    """Load, validate, and cache a :class:`PagequerySettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]
    settings = PagequerySettings()
    _settings_cache["default"] = settings
    return settings


__all__ = ["PagequerySettings", "get_settings"]
