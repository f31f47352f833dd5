"""Configuration using Pydantic Settings.

This module centralizes runtime configuration for buses created through
``create_event_bus``. Values can be provided via environment variables
(preferred) or fall back to the defaults below. A ``Settings`` instance is
intended to be retrieved via ``get_settings`` which caches the object for
reuse across the process.

Environment variable prefix: ``EVENTBUS_`` (e.g. ``EVENTBUS_OFFLINE``).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR"}


class Settings(BaseSettings):
    """Runtime settings.

    Attributes map directly to environment variables using the ``EVENTBUS_``
    prefix (case-insensitive). For example, ``offline`` <- ``EVENTBUS_OFFLINE``.
    """

    offline: bool = Field(
        default=False,
        description="Buffer events emitted before any listener exists",
    )  # fmt: skip
    log_level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level used by setup_logging",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | None) -> str:
        """Normalize and validate log level."""
        if v is None:
            return "INFO"

        v_upper = str(v).upper()
        if v_upper not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of: {', '.join(sorted(LOG_LEVELS))}")

        return v_upper

    model_config = SettingsConfigDict(
        env_prefix="EVENTBUS_",
        case_sensitive=False,
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )


@lru_cache
def get_settings() -> Settings:
    """Return the cached ``Settings`` instance.

    The first invocation reads environment variables / .env file; subsequent
    calls reuse the same object to ensure consistent config.
    """

    return Settings()


__all__ = ["Settings", "get_settings"]
