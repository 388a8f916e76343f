"""Performance logging for sqlwatch operations.

Times connection opens and introspection queries and keeps simple
per-operation aggregates.

Classes:
    TimingMetrics: A single timing measurement
    PerformanceMetrics: Aggregated metrics for one operation
    TimingContext: Context manager for operation timing
    PerformanceLogger: Main performance logging interface

Example:
    >>> perf_logger = PerformanceLogger("explorers")
    >>> with perf_logger.measure("get_tables", dialect="sqlite") as timer:
    ...     tables = await explorer.get_tables()
    >>> timer.duration_ms
    1.42
"""

import statistics
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator, List, Optional

from .structured import StructuredLogger


@dataclass
class TimingMetrics:
    """Metrics for a single timing measurement."""
    operation: str
    start_time: float
    end_time: Optional[float] = None
    duration: Optional[float] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error: Optional[str] = None

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        self.end_time = time.perf_counter()
        self.duration = self.end_time - self.start_time
        self.success = success
        self.error = error

    @property
    def duration_ms(self) -> Optional[float]:
        return self.duration * 1000 if self.duration is not None else None

    @property
    def is_complete(self) -> bool:
        return self.end_time is not None


@dataclass
class PerformanceMetrics:
    """Aggregated performance metrics for an operation.

    Attributes:
        operation: Operation name
        total_calls: Total number of calls
        successful_calls: Number of successful calls
        failed_calls: Number of failed calls
        total_duration: Total duration in seconds
        min_duration: Minimum duration
        max_duration: Maximum duration
        avg_duration: Average duration
    """
    operation: str
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    total_duration: float = 0.0
    min_duration: Optional[float] = None
    max_duration: Optional[float] = None
    avg_duration: Optional[float] = None
    _durations: List[float] = field(default_factory=list, repr=False)

    def add_timing(self, timing: TimingMetrics) -> None:
        """Add a completed timing measurement to the aggregates."""
        if not timing.is_complete or timing.duration is None:
            return

        self.total_calls += 1
        if timing.success:
            self.successful_calls += 1
        else:
            self.failed_calls += 1

        duration = timing.duration
        self.total_duration += duration
        self._durations.append(duration)

        if self.min_duration is None or duration < self.min_duration:
            self.min_duration = duration
        if self.max_duration is None or duration > self.max_duration:
            self.max_duration = duration
        self.avg_duration = statistics.mean(self._durations)

    @property
    def success_rate(self) -> float:
        """Success rate as a percentage (0-100)."""
        if self.total_calls == 0:
            return 0.0
        return (self.successful_calls / self.total_calls) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "total_duration": self.total_duration,
            "min_duration": self.min_duration,
            "max_duration": self.max_duration,
            "avg_duration": self.avg_duration,
            "success_rate": self.success_rate,
        }


class TimingContext:
    """Context manager measuring one operation.

    Logs a debug event on success and a warning on failure when a logger
    is attached. Exceptions are never suppressed.
    """

    def __init__(
        self,
        operation: str,
        *,
        logger: Optional[StructuredLogger] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.operation = operation
        self.logger = logger
        self.metadata = metadata or {}
        self._timing: Optional[TimingMetrics] = None

    @property
    def timing(self) -> Optional[TimingMetrics]:
        return self._timing

    @property
    def duration(self) -> Optional[float]:
        return self._timing.duration if self._timing else None

    @property
    def duration_ms(self) -> Optional[float]:
        return self._timing.duration_ms if self._timing else None

    def __enter__(self) -> "TimingContext":
        self._timing = TimingMetrics(
            operation=self.operation,
            start_time=time.perf_counter(),
            metadata=self.metadata,
        )
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._timing is None:
            return

        success = exc_type is None
        error = str(exc_val) if exc_val else None
        self._timing.complete(success=success, error=error)

        if self.logger is None:
            return
        if success:
            self.logger.debug(
                "Operation completed",
                operation=self.operation,
                duration_ms=self._timing.duration_ms,
                **self.metadata,
            )
        else:
            self.logger.warning(
                "Operation failed",
                operation=self.operation,
                duration_ms=self._timing.duration_ms,
                error=error,
                error_type=exc_type.__name__,
                **self.metadata,
            )


class PerformanceLogger:
    """Performance logger for timing sqlwatch operations.

    Example:
        >>> perf_logger = PerformanceLogger("pool")
        >>> with perf_logger.measure("open", driver="postgres"):
        ...     handle = await open_connection("postgres", dsn)
        >>> perf_logger.get_metrics("open").total_calls
        1
    """

    def __init__(
        self,
        name: str,
        *,
        auto_log: bool = True,
        track_metrics: bool = True,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        self.name = name
        self.auto_log = auto_log
        self.track_metrics = track_metrics
        self.logger = logger or StructuredLogger(f"perf.{name}")
        self._metrics: Dict[str, PerformanceMetrics] = {}

    @contextmanager
    def measure(self, operation: str, **metadata: Any) -> Generator[TimingContext, None, None]:
        """Measure the enclosed block.

        Args:
            operation: Operation name
            **metadata: Additional fields attached to the log event

        Yields:
            TimingContext for the operation
        """
        timing_context = TimingContext(
            operation,
            logger=self.logger if self.auto_log else None,
            metadata=metadata,
        )
        try:
            with timing_context as ctx:
                yield ctx
        finally:
            if self.track_metrics and timing_context.timing:
                metrics = self._metrics.setdefault(operation, PerformanceMetrics(operation=operation))
                metrics.add_timing(timing_context.timing)

    def get_metrics(self, operation: str) -> Optional[PerformanceMetrics]:
        """Return aggregated metrics for ``operation``, if any were recorded."""
        return self._metrics.get(operation)

    def get_summary(self) -> Dict[str, Dict[str, Any]]:
        """Return aggregated metrics for every recorded operation."""
        return {name: metrics.to_dict() for name, metrics in sorted(self._metrics.items())}

    def reset_metrics(self) -> None:
        self._metrics.clear()

    def __repr__(self) -> str:
        return f"PerformanceLogger(name={self.name!r}, operations={len(self._metrics)})"
