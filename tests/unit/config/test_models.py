"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from sqlwatch.config.models import (
    LoggingConfig,
    PoolConfig,
    RegistryConfig,
    SqlWatchSettings,
)


class TestPoolConfig:
    """Test cases for PoolConfig."""

    def test_defaults(self):
        config = PoolConfig()

        assert config.connect_timeout == 10.0
        assert config.query_timeout is None
        assert config.ping_on_get is False
        assert config.sqlite_create_missing is False

    def test_rejects_non_positive_timeouts(self):
        with pytest.raises(PydanticValidationError):
            PoolConfig(connect_timeout=0)
        with pytest.raises(PydanticValidationError):
            PoolConfig(query_timeout=-1)

    def test_rejects_unknown_fields(self):
        """Unknown fields are rejected."""
        with pytest.raises(PydanticValidationError):
            PoolConfig(max_size=10)

    def test_validate_assignment(self):
        config = PoolConfig()

        with pytest.raises(PydanticValidationError):
            config.connect_timeout = -5

    def test_environment_variable_expansion(self, monkeypatch):
        """``${VAR}`` and ``${VAR:default}`` are expanded before validation."""
        monkeypatch.setenv("SQLWATCH_TEST_TIMEOUT", "2.5")
        monkeypatch.delenv("SQLWATCH_TEST_MISSING", raising=False)

        config = PoolConfig(
            connect_timeout="${SQLWATCH_TEST_TIMEOUT}",
            query_timeout="${SQLWATCH_TEST_MISSING:7}",
        )

        assert config.connect_timeout == 2.5
        assert config.query_timeout == 7.0

    def test_update_from_dict(self):
        config = PoolConfig()

        updated = config.update_from_dict({"ping_on_get": True})

        assert updated.ping_on_get is True
        assert config.ping_on_get is False
        assert updated.to_dict()["connect_timeout"] == 10.0


class TestRegistryConfig:
    """Test cases for RegistryConfig."""

    def test_path_layout(self, temp_dir):
        config = RegistryConfig(config_dir=temp_dir)

        assert config.path == temp_dir / "sqlwatch" / "config.yaml"

    def test_default_prefers_xdg_config_home(self, monkeypatch, temp_dir):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(temp_dir))

        assert RegistryConfig().config_dir == temp_dir

    def test_default_falls_back_to_home(self, monkeypatch, temp_dir):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(temp_dir))

        assert RegistryConfig().config_dir == temp_dir / ".config"

    @pytest.mark.parametrize("value", ["a/b", "..", ".", "a\\b"])
    def test_rejects_nested_components(self, value, temp_dir):
        """App dir and file name must be single path components."""
        with pytest.raises(PydanticValidationError):
            RegistryConfig(config_dir=temp_dir, app_dir=value)
        with pytest.raises(PydanticValidationError):
            RegistryConfig(config_dir=temp_dir, filename=value)


class TestLoggingConfig:
    """Test cases for LoggingConfig."""

    def test_defaults(self):
        config = LoggingConfig()

        assert config.level == "INFO"
        assert config.format == "json"
        assert config.file_path is None
        assert config.max_file_size == 10485760
        assert config.backup_count == 5
        assert config.console_output is True

    def test_level_and_format_are_normalized(self):
        config = LoggingConfig(level="debug", format="TEXT")

        assert config.level == "DEBUG"
        assert config.format == "text"

    def test_rejects_invalid_values(self):
        with pytest.raises(PydanticValidationError):
            LoggingConfig(level="VERBOSE")
        with pytest.raises(PydanticValidationError):
            LoggingConfig(format="xml")
        with pytest.raises(PydanticValidationError):
            LoggingConfig(max_file_size=0)
        with pytest.raises(PydanticValidationError):
            LoggingConfig(backup_count=-1)


class TestSqlWatchSettings:
    """Test cases for aggregated settings."""

    def test_from_env(self, temp_dir):
        settings = SqlWatchSettings.from_env({
            "SQLWATCH_CONNECT_TIMEOUT": "3",
            "SQLWATCH_QUERY_TIMEOUT": "5",
            "SQLWATCH_PING_ON_GET": "true",
            "SQLWATCH_CONFIG_DIR": str(temp_dir),
            "SQLWATCH_LOG_LEVEL": "warning",
            "SQLWATCH_LOG_FORMAT": "text",
            "SQLWATCH_LOG_FILE": str(temp_dir / "sqlwatch.log"),
        })

        assert settings.pool.connect_timeout == 3.0
        assert settings.pool.query_timeout == 5.0
        assert settings.pool.ping_on_get is True
        assert settings.registry.path == temp_dir / "sqlwatch" / "config.yaml"
        assert settings.logging.level == "WARNING"
        assert settings.logging.format == "text"
        assert settings.logging.file_path == Path(temp_dir / "sqlwatch.log")

    def test_empty_variables_keep_defaults(self, temp_dir):
        settings = SqlWatchSettings.from_env({
            "SQLWATCH_QUERY_TIMEOUT": "",
            "SQLWATCH_CONFIG_DIR": str(temp_dir),
        })

        assert settings.pool.query_timeout is None
        assert settings.pool.connect_timeout == 10.0
        assert settings.logging.level == "INFO"

    def test_invalid_value_is_rejected(self, temp_dir):
        with pytest.raises(PydanticValidationError):
            SqlWatchSettings.from_env({
                "SQLWATCH_CONNECT_TIMEOUT": "soon",
                "SQLWATCH_CONFIG_DIR": str(temp_dir),
            })
