"""Performance profiler for codec operations."""

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

import psutil


@dataclass
class PerformanceMetrics:
    """Performance metrics for one codec operation."""
    operation_name: str
    start_time: float
    end_time: float
    duration: float
    input_size: int
    output_size: int
    memory_peak_mb: float
    memory_start_mb: float
    memory_end_mb: float
    throughput_mbps: float


class ProfilingSession:
    """Handle yielded by :meth:`PerformanceProfiler.profile_operation`."""

    def __init__(self, profiler: 'PerformanceProfiler'):
        self.profiler = profiler
        self.output_size = 0

    def record_output(self, size: int) -> None:
        """Record the size of the operation's output in bytes."""
        self.output_size = size

    def sample(self) -> None:
        """Sample memory usage now, for operations with several phases."""
        self.profiler.sample_performance()


class PerformanceProfiler:
    """
    Records duration, throughput and process memory of codec operations.

    Memory figures are the resident set size of the current process as
    reported by psutil.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the performance profiler.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.metrics_history: List[PerformanceMetrics] = []
        self.current_operation: Optional[str] = None
        self.start_time: Optional[float] = None
        self.start_memory: float = 0
        self.peak_memory: float = 0
        self.input_size = 0

    @contextmanager
    def profile_operation(self, operation_name: str, input_size: int = 0) -> Iterator[ProfilingSession]:
        """
        Context manager for profiling operations.

        Metrics are recorded only when the block completes without raising.

        Args:
            operation_name: Name of the operation being profiled
            input_size: Size of input data in bytes
        """
        self.start_profiling(operation_name, input_size)
        session = ProfilingSession(self)
        try:
            yield session
        except BaseException:
            self._reset()
            raise
        self.stop_profiling(session.output_size)

    def start_profiling(self, operation_name: str, input_size: int = 0) -> None:
        """
        Start profiling an operation.

        Args:
            operation_name: Name of the operation
            input_size: Size of input data in bytes
        """
        self.current_operation = operation_name
        self.start_time = time.perf_counter()
        self.input_size = input_size
        self.start_memory = self._current_memory_mb()
        self.peak_memory = self.start_memory

        self.logger.debug(f"Started profiling: {operation_name}")

    def sample_performance(self) -> None:
        """Sample current memory usage."""
        if not self.current_operation:
            return
        self.peak_memory = max(self.peak_memory, self._current_memory_mb())

    def stop_profiling(self, output_size: int = 0) -> PerformanceMetrics:
        """
        Stop profiling and return metrics.

        Args:
            output_size: Size of output data in bytes

        Returns:
            PerformanceMetrics object with collected data
        """
        if not self.current_operation or self.start_time is None:
            raise ValueError("No active profiling session")

        end_time = time.perf_counter()
        duration = end_time - self.start_time
        end_memory = self._current_memory_mb()
        self.peak_memory = max(self.peak_memory, end_memory)
        throughput = (self.input_size / 1024 / 1024) / duration if duration > 0 else 0  # MB/s

        metrics = PerformanceMetrics(
            operation_name=self.current_operation,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            input_size=self.input_size,
            output_size=output_size,
            memory_peak_mb=self.peak_memory,
            memory_start_mb=self.start_memory,
            memory_end_mb=end_memory,
            throughput_mbps=throughput
        )
        self.metrics_history.append(metrics)

        self.logger.info(f"Performance Summary - {metrics.operation_name}: "
                         f"{duration * 1000:.2f}ms, {throughput:.2f} MB/s, "
                         f"memory peak {self.peak_memory:.1f} MB")

        self._reset()
        return metrics

    def _reset(self) -> None:
        self.current_operation = None
        self.start_time = None

    @staticmethod
    def _current_memory_mb() -> float:
        return psutil.Process().memory_info().rss / 1024 / 1024

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get summary of all performance metrics.

        Returns:
            Dictionary with performance summary
        """
        if not self.metrics_history:
            return {"total_operations": 0}

        total_duration = sum(m.duration for m in self.metrics_history)
        total_input = sum(m.input_size for m in self.metrics_history)
        total_output = sum(m.output_size for m in self.metrics_history)

        return {
            "total_operations": len(self.metrics_history),
            "total_duration": total_duration,
            "total_input_bytes": total_input,
            "total_output_bytes": total_output,
            "max_memory_peak_mb": max(m.memory_peak_mb for m in self.metrics_history),
            "operations": [
                {
                    "name": m.operation_name,
                    "duration": m.duration,
                    "throughput": m.throughput_mbps,
                    "memory_peak": m.memory_peak_mb,
                }
                for m in self.metrics_history
            ]
        }

    def export_metrics(self, format: str = "json") -> str:
        """
        Export performance metrics in specified format.

        Args:
            format: Export format ("json" or "summary")

        Returns:
            Formatted metrics string
        """
        if format == "json":
            return json.dumps([
                {
                    "operation": m.operation_name,
                    "duration": m.duration,
                    "input_size": m.input_size,
                    "output_size": m.output_size,
                    "memory_peak_mb": m.memory_peak_mb,
                    "throughput_mbps": m.throughput_mbps,
                }
                for m in self.metrics_history
            ], indent=2)

        elif format == "summary":
            lines = [f"Performance Summary ({len(self.metrics_history)} operations):"]
            for m in self.metrics_history:
                lines.append(f"  {m.operation_name}: {m.duration * 1000:.2f}ms, "
                             f"{m.input_size} -> {m.output_size} bytes, "
                             f"{m.throughput_mbps:.2f} MB/s, memory peak {m.memory_peak_mb:.1f} MB")
            return "\n".join(lines)

        else:
            raise ValueError(f"Unsupported export format: {format}")
