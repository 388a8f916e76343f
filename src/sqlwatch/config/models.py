"""Configuration models for sqlwatch.

This module defines the Pydantic models for the connection pool, the
connection registry and the logging system. They provide validation,
type safety and environment variable expansion.

Classes:
    BaseConfig: Base configuration class
    PoolConfig: Connection pool and query timeout configuration
    RegistryConfig: Location of the persisted connection registry
    LoggingConfig: Logging configuration
    SqlWatchSettings: Aggregate of all configuration sections

Example:
    >>> settings = SqlWatchSettings.from_env()
    >>> settings.registry.path
    PosixPath('/home/me/.config/sqlwatch/config.yaml')
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator, model_validator

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _default_config_dir() -> Path:
    """Resolve the user configuration directory.

    ``$XDG_CONFIG_HOME`` wins; otherwise ``$HOME/.config``.
    """
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    home = os.environ.get("HOME")
    if home:
        return Path(home) / ".config"
    return Path.home() / ".config"


class BaseConfig(BaseModel):
    """Base configuration class with common functionality.

    Unknown fields are rejected and assignments are re-validated. String
    values may reference environment variables as ``${VAR}`` or
    ``${VAR:default}``.

    Example:
        >>> class MyConfig(BaseConfig):
        ...     name: str
        ...     value: int = 42
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        use_enum_values=True,
        validate_default=True,
        populate_by_name=True,
    )

    @model_validator(mode="before")
    @classmethod
    def resolve_environment_variables(cls, values: Any) -> Any:
        """Resolve environment variables in configuration values.

        Supports ${VAR_NAME} and ${VAR_NAME:default_value} syntax.
        """
        def replace_env_var(match: "re.Match[str]") -> str:
            var_spec = match.group(1)
            if ":" in var_spec:
                var_name, default = var_spec.split(":", 1)
            else:
                var_name, default = var_spec, ""
            return os.getenv(var_name, default)

        def resolve_value(value: Any) -> Any:
            if isinstance(value, str):
                return _ENV_PATTERN.sub(replace_env_var, value)
            elif isinstance(value, dict):
                return {k: resolve_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [resolve_value(item) for item in value]
            else:
                return value

        if not isinstance(values, dict):
            return values
        return {key: resolve_value(value) for key, value in values.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")

    def update_from_dict(self, data: Dict[str, Any]) -> "BaseConfig":
        """Return a new configuration with ``data`` applied on top."""
        current_data = self.model_dump()
        current_data.update(data)
        return self.__class__(**current_data)


class PoolConfig(BaseConfig):
    """Connection pool configuration.

    Attributes:
        connect_timeout: Deadline in seconds for opening a connection
        query_timeout: Default deadline in seconds for explorer statements
            (None means no limit)
        ping_on_get: Ping cached handles before returning them and reopen
            on failure
        sqlite_create_missing: Let SQLite create a database file that does
            not exist yet instead of failing the connect
    """

    connect_timeout: Optional[PositiveFloat] = Field(10.0, description="Connect timeout in seconds")
    query_timeout: Optional[PositiveFloat] = Field(None, description="Default query timeout in seconds")
    ping_on_get: bool = Field(False, description="Health-check cached connections on reuse")
    sqlite_create_missing: bool = Field(False, description="Create missing SQLite files on connect")


class RegistryConfig(BaseConfig):
    """Location of the connection registry file.

    The file lives at ``<config_dir>/<app_dir>/<filename>``.
    """

    config_dir: Path = Field(default_factory=_default_config_dir, description="User configuration directory")
    app_dir: str = Field("sqlwatch", min_length=1, description="Application subdirectory")
    filename: str = Field("config.yaml", min_length=1, description="Registry file name")

    @field_validator("app_dir", "filename")
    @classmethod
    def validate_path_component(cls, v: str) -> str:
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"must be a single path component: {v!r}")
        return v

    @property
    def path(self) -> Path:
        """Full path of the registry file."""
        return self.config_dir / self.app_dir / self.filename


class LoggingConfig(BaseConfig):
    """Logging configuration.

    Attributes:
        level: Log level
        format: Log format (json, text)
        file_path: Log file path, e.g. ``debug.log``
        max_file_size: Maximum log file size in bytes before rotation
        backup_count: Number of rotated files to keep
        console_output: Enable console output
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Logging level"
    )
    format: Literal["json", "text"] = Field("json", description="Log format")
    file_path: Optional[Path] = Field(None, description="Log file path")
    max_file_size: int = Field(10485760, gt=0, description="Max file size in bytes (10MB)")
    backup_count: int = Field(5, ge=0, description="Number of backup files")
    console_output: bool = Field(True, description="Enable console output")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        return v.upper() if isinstance(v, str) else v

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v: Any) -> Any:
        return v.lower() if isinstance(v, str) else v


class SqlWatchSettings(BaseConfig):
    """All sqlwatch configuration sections.

    Example:
        >>> settings = SqlWatchSettings.from_env({"SQLWATCH_QUERY_TIMEOUT": "5"})
        >>> settings.pool.query_timeout
        5.0
    """

    pool: PoolConfig = Field(default_factory=PoolConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SqlWatchSettings":
        """Build settings from ``SQLWATCH_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Unset or empty variables keep their defaults.
        """
        env = os.environ if environ is None else environ

        def read(key: str) -> Optional[str]:
            value = env.get(key)
            return value if value else None

        pool: Dict[str, Any] = {}
        registry: Dict[str, Any] = {}
        logging_section: Dict[str, Any] = {}

        if read("SQLWATCH_CONNECT_TIMEOUT"):
            pool["connect_timeout"] = read("SQLWATCH_CONNECT_TIMEOUT")
        if read("SQLWATCH_QUERY_TIMEOUT"):
            pool["query_timeout"] = read("SQLWATCH_QUERY_TIMEOUT")
        if read("SQLWATCH_PING_ON_GET"):
            pool["ping_on_get"] = read("SQLWATCH_PING_ON_GET")
        if read("SQLWATCH_CONFIG_DIR"):
            registry["config_dir"] = read("SQLWATCH_CONFIG_DIR")
        if read("SQLWATCH_LOG_LEVEL"):
            logging_section["level"] = read("SQLWATCH_LOG_LEVEL")
        if read("SQLWATCH_LOG_FORMAT"):
            logging_section["format"] = read("SQLWATCH_LOG_FORMAT")
        if read("SQLWATCH_LOG_FILE"):
            logging_section["file_path"] = read("SQLWATCH_LOG_FILE")

        return cls(
            pool=PoolConfig(**pool),
            registry=RegistryConfig(**registry),
            logging=LoggingConfig(**logging_section),
        )
