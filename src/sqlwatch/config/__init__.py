"""sqlwatch configuration models.

Example:
    >>> from sqlwatch.config import SqlWatchSettings
    >>> settings = SqlWatchSettings.from_env()
"""

from .models import BaseConfig, LoggingConfig, PoolConfig, RegistryConfig, SqlWatchSettings

__all__ = [
    "BaseConfig",
    "LoggingConfig",
    "PoolConfig",
    "RegistryConfig",
    "SqlWatchSettings",
]
