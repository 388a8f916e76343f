"""Unit tests for sqlwatch component base classes.

This module tests configuration handling, health reporting and the async
initialize/cleanup lifecycle.
"""

import pytest

from sqlwatch.core.base import AsyncComponent, BaseComponent
from sqlwatch.core.exceptions import QueryError, SqlWatchException, ValidationError


# Test configuration class - NOT a test class (no Test prefix)
class ComponentTestConfig:
    """Test configuration for component testing."""
    def __init__(self, name: str = "test"):
        self.name = name


class _TestableBaseComponent(BaseComponent[ComponentTestConfig]):
    """Test implementation of BaseComponent."""
    component_name = "TestComponent"


class _TestableAsyncComponent(AsyncComponent[ComponentTestConfig]):
    """Test implementation of AsyncComponent."""
    component_name = "TestAsyncComponent"

    def __init__(self, config: ComponentTestConfig, *, fail_with: Exception = None):
        super().__init__(config)
        self.fail_with = fail_with
        self.initialize_calls = 0
        self.cleanup_calls = 0

    async def _async_initialize(self) -> None:
        self.initialize_calls += 1
        if self.fail_with is not None:
            raise self.fail_with

    async def _async_cleanup(self) -> None:
        self.cleanup_calls += 1


class TestBaseComponent:
    """Test BaseComponent functionality."""

    def test_component_initialization(self):
        """Test basic component initialization."""
        config = ComponentTestConfig(name="pool")
        component = _TestableBaseComponent(config)

        assert component.config is config
        assert not component.is_initialized
        assert component.component_name == "TestComponent"
        assert component.uptime >= 0

    def test_component_initialization_with_none_config(self):
        """Test component initialization with None config raises error."""
        with pytest.raises(ValidationError) as exc_info:
            _TestableBaseComponent(None)

        assert exc_info.value.code == "CONFIG_NULL"
        assert exc_info.value.context == {"component": "TestComponent"}

    def test_component_health_status(self):
        """Test component health status reporting."""
        component = _TestableBaseComponent(ComponentTestConfig())

        health = component.get_health_status()

        assert health["component"] == "TestComponent"
        assert health["version"] == "1.0.0"
        assert health["initialized"] is False
        assert "uptime_seconds" in health

    def test_component_repr(self):
        """Test component string representation."""
        repr_str = repr(_TestableBaseComponent(ComponentTestConfig()))

        assert "_TestableBaseComponent" in repr_str
        assert "initialized=False" in repr_str


class TestAsyncComponent:
    """Test AsyncComponent lifecycle."""

    @pytest.mark.asyncio
    async def test_initialize_runs_once(self):
        """Repeated initialize calls run the hook once."""
        component = _TestableAsyncComponent(ComponentTestConfig())

        await component.initialize()
        await component.initialize()

        assert component.is_initialized
        assert component.initialize_calls == 1

    @pytest.mark.asyncio
    async def test_context_manager(self):
        """The async context manager initializes and cleans up."""
        component = _TestableAsyncComponent(ComponentTestConfig())

        async with component as entered:
            assert entered is component
            assert component.is_initialized

        assert not component.is_initialized
        assert component.cleanup_calls == 1

    @pytest.mark.asyncio
    async def test_initialize_wraps_unexpected_errors(self):
        """Non-sqlwatch failures are wrapped as INIT_FAILED."""
        component = _TestableAsyncComponent(ComponentTestConfig(), fail_with=RuntimeError("boom"))

        with pytest.raises(SqlWatchException) as exc_info:
            await component.initialize()

        assert exc_info.value.code == "INIT_FAILED"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert not component.is_initialized

    @pytest.mark.asyncio
    async def test_initialize_passes_sqlwatch_errors_through(self):
        """sqlwatch errors keep their type."""
        error = QueryError("catalog unavailable")
        component = _TestableAsyncComponent(ComponentTestConfig(), fail_with=error)

        with pytest.raises(QueryError) as exc_info:
            await component.initialize()

        assert exc_info.value is error
