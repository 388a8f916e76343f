"""Base classes for sqlwatch components.

This module provides the small component hierarchy shared by the
long-lived engine objects (the connection pool in particular): a
configuration holder with health reporting, and an async variant with
initialize/cleanup hooks and async context manager support.

Classes:
    BaseComponent: Generic base class holding a validated configuration
    AsyncComponent: Base class for components owning async resources

Example:
    >>> class ConnectionPool(AsyncComponent[PoolConfig]):
    ...     async def _async_cleanup(self) -> None:
    ...         await self.close()
"""

import asyncio
import time
from abc import ABC
from typing import Any, ClassVar, Dict, Generic, TypeVar

from .exceptions import ValidationError, SqlWatchException
from ..logging import get_logger

T = TypeVar("T")  # Configuration type


class BaseComponent(Generic[T], ABC):
    """Base class for all sqlwatch components.

    Type Parameters:
        T: Type of configuration object this component accepts

    Attributes:
        component_name: Name of the component for logging and identification
        version: Component version
    """

    component_name: ClassVar[str] = "BaseComponent"
    version: ClassVar[str] = "1.0.0"

    def __init__(self, config: T) -> None:
        """Initialize base component.

        Args:
            config: Configuration object for this component

        Raises:
            ValidationError: If configuration is missing
        """
        if config is None:
            raise ValidationError(
                "Configuration cannot be None",
                code="CONFIG_NULL",
                context={"component": self.component_name},
            )

        self._config: T = config
        self._initialized: bool = False
        self._creation_time: float = time.time()
        self._logger = get_logger(f"sqlwatch.component.{self.component_name}")

    @property
    def config(self) -> T:
        """Get component configuration."""
        return self._config

    @property
    def is_initialized(self) -> bool:
        """Check if component is initialized."""
        return self._initialized

    @property
    def uptime(self) -> float:
        """Get component uptime in seconds."""
        return time.time() - self._creation_time

    def get_health_status(self) -> Dict[str, Any]:
        """Get component health status.

        Returns:
            Dictionary containing component health information
        """
        return {
            "component": self.component_name,
            "version": self.version,
            "initialized": self._initialized,
            "uptime_seconds": self.uptime,
        }

    def __repr__(self) -> str:
        """Return string representation of component."""
        return (
            f"{self.__class__.__name__}("
            f"name={self.component_name!r}, "
            f"initialized={self._initialized}, "
            f"uptime={self.uptime:.2f}s)"
        )


class AsyncComponent(BaseComponent[T]):
    """Base class for async-capable components.

    Provides serialized async initialization and cleanup. Unlike
    initialization failures, which are wrapped, cleanup failures propagate
    unchanged so that aggregated shutdown errors reach the caller.
    """

    def __init__(self, config: T) -> None:
        super().__init__(config)
        self._initialization_lock = asyncio.Lock()
        self._cleanup_lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize component asynchronously.

        Raises:
            SqlWatchException: If initialization fails
        """
        async with self._initialization_lock:
            if self._initialized:
                return

            self._logger.debug("Initializing component", component=self.component_name)
            try:
                await self._async_initialize()
            except SqlWatchException:
                raise
            except Exception as e:
                self._logger.error(
                    "Component initialization failed",
                    component=self.component_name,
                    error=str(e),
                )
                raise SqlWatchException(
                    f"Failed to initialize {self.component_name}",
                    code="INIT_FAILED",
                    context={"component": self.component_name},
                    cause=e,
                ) from e
            self._initialized = True

    async def cleanup(self) -> None:
        """Release component resources asynchronously."""
        async with self._cleanup_lock:
            self._logger.debug("Cleaning up component", component=self.component_name)
            try:
                await self._async_cleanup()
            finally:
                self._initialized = False

    async def _async_initialize(self) -> None:
        """Perform async initialization work."""

    async def _async_cleanup(self) -> None:
        """Perform async cleanup work."""

    async def __aenter__(self) -> "AsyncComponent[T]":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.cleanup()
