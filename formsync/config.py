"""Settings for formsync, read from the environment or a .env file."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FormSyncSettings(BaseSettings):
    """formsync configuration.

    Every setting can be overridden with a FORMSYNC_ prefixed environment
    variable, e.g. FORMSYNC_LOG_LEVEL=DEBUG.
    """

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="'console' or 'json'")

    model_config = SettingsConfigDict(
        env_prefix="FORMSYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> FormSyncSettings:
    """Get formsync settings."""
    return FormSyncSettings()


__all__ = [
    "FormSyncSettings",
    "get_settings",
]
