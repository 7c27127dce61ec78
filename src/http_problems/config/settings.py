"""Configuration system for problem detail rendering."""

from __future__ import annotations

from collections.abc import Sequence
from functools import lru_cache

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseModel):
    """Structured logging configuration."""

    level: str = Field(default="INFO", description="Log level for library output")
    scrub_fields: Sequence[str] = Field(
        default_factory=lambda: ["password", "token", "secret", "authorization"],
        description="Fields that should be redacted in logs",
    )


class ProblemSettings(BaseSettings):
    """Top-level settings for problem rendering."""

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    pretty_indent: int = Field(default=2, ge=0, description="Indent used by pretty_print dumps")
    validation_location: str = Field(
        default="body",
        description="Location reported for validation issues without a location prefix",
    )
    xml_namespace: str = Field(
        default="urn:ietf:rfc:7807",
        description="Namespace of the XML problem document",
    )

    model_config = SettingsConfigDict(env_prefix="PROBLEMS_", env_nested_delimiter="__")


def load_settings() -> ProblemSettings:
    """Load settings from the environment."""
    try:
        return ProblemSettings()
    except ValidationError as err:
        raise RuntimeError(f"Invalid configuration: {err}") from err


@lru_cache(maxsize=1)
def get_settings() -> ProblemSettings:
    """Cached accessor used by production code."""
    return load_settings()
