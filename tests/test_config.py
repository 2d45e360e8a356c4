"""Tests for AccessControlConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from contextacl import AccessControlConfig, LogLevel, load_config_from_env


class TestAccessControlConfig:
    """Tests for AccessControlConfig model."""

    def test_defaults(self) -> None:
        config = AccessControlConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_json is False
        assert config.service_name is None
        assert config.strict_permissions is False

    def test_log_level_from_string(self) -> None:
        """Log level strings are accepted case-insensitively."""
        assert AccessControlConfig(log_level="debug").log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            AccessControlConfig(log_level="INVALID")

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            AccessControlConfig(redis_url="redis://localhost")  # type: ignore[call-arg]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env()."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()
        assert config.log_level == LogLevel.INFO
        assert config.strict_permissions is False

    def test_values(self) -> None:
        env = {
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "true",
            "SERVICE_NAME": "acl-service",
            "ACL_STRICT_PERMISSIONS": "1",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.service_name == "acl-service"
        assert config.strict_permissions is True
