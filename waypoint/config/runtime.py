"""
Waypoint API: Runtime Settings
==============================

What:  Process-level knobs that are not part of the application schema:
       log verbosity and the interface the listener binds to.
How:   pydantic-settings reads them from the environment (or .env) with
       defaults suitable for containers.
"""

from typing import Mapping

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from waypoint.exceptions import ConfigValidationError, FieldError


class RuntimeSettings(BaseSettings):
    """
    Ambient runtime settings.

    These only control how the process runs, never what it serves, so they
    have safe defaults and are read separately from the fail-fast schema.
    """

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    # 0.0.0.0 so the listener is reachable from outside a container
    host: str = Field(default="0.0.0.0")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper


def load_runtime_settings(raw: Mapping[str, str]) -> RuntimeSettings:
    """
    Build RuntimeSettings from the same snapshot the schema is validated on.

    Every field is passed explicitly, so nothing is read from os.environ or a
    .env file behind the snapshot's back. Failures are raised as
    ConfigValidationError with the variable names as paths, so they share the
    startup report format.
    """
    values = {
        name: raw.get(name.upper(), field.default)
        for name, field in RuntimeSettings.model_fields.items()
    }
    try:
        return RuntimeSettings(_env_file=None, **values)
    except ValidationError as exc:
        errors = [
            FieldError(str(error["loc"][0]).upper(), error["msg"])
            for error in exc.errors()
        ]
        raise ConfigValidationError(errors) from exc
