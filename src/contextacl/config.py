"""Configuration for contextacl.

Pydantic-validated settings shared by the provider and the logging setup.
Services embedding an AccessControlProvider either build an
``AccessControlConfig`` directly or load it from the environment with
``load_config_from_env()``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AccessControlConfig(BaseModel):
    """Settings for the access control provider.

    Environment variables:
        LOG_LEVEL               — logging level (default: INFO)
        LOG_JSON                — JSON log output (default: false)
        SERVICE_NAME            — service name for logger identification
        ACL_STRICT_PERMISSIONS  — treat duplicate permission ids as fatal
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Service identification
    service_name: Optional[str] = Field(
        default=None,
        description="Service name for logger identification",
    )

    # Schema validation
    strict_permissions: bool = Field(
        default=False,
        description=(
            "Reject schemas that bind one permission id to distinct permission "
            "nodes. Default: log a warning and keep the first binding."
        ),
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def _env_flag(raw: str) -> bool:
    return raw.lower() in ("true", "1", "yes", "on")


def load_config_from_env() -> AccessControlConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - SERVICE_NAME: Service name
    - ACL_STRICT_PERMISSIONS: Duplicate permission ids are fatal (true/false)

    Returns:
        AccessControlConfig instance with values from environment or defaults.
    """
    import os

    return AccessControlConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=_env_flag(os.getenv("LOG_JSON", "false")),
        service_name=os.getenv("SERVICE_NAME"),
        strict_permissions=_env_flag(os.getenv("ACL_STRICT_PERMISSIONS", "false")),
    )


__all__ = [
    "AccessControlConfig",
    "LogLevel",
    "load_config_from_env",
]
