"""Performance logging utilities for git operations."""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Optional, Any, Generator, List


@dataclass
class PerformanceMetrics:
    """Performance metrics for a git operation."""
    operation: str
    duration: float
    start_time: float
    end_time: float
    context: Optional[Dict[str, Any]] = None
    success: bool = True


class PerformanceLogger:
    """
    Performance logger for remote queries and repository reads.

    Provides timing utilities and performance metrics collection so slow
    remotes show up in the debug trace.
    """

    def __init__(self, logger_name: str = 'refscout.git_refs.performance'):
        """
        Initialize performance logger.

        Args:
            logger_name: Name for the logger instance
        """
        self.logger = logging.getLogger(logger_name)
        self._metrics: List[PerformanceMetrics] = []

    @contextmanager
    def time_operation(
        self,
        operation: str,
        context: Optional[Dict[str, Any]] = None,
        log_level: int = logging.DEBUG
    ) -> Generator[Dict[str, bool], None, None]:
        """
        Context manager for timing operations.

        Yields a mutable outcome dict; set ``outcome["success"] = False`` when
        the operation reports failure without raising (retried git calls).

        Args:
            operation: Name of the operation being timed
            context: Additional context information
            log_level: Logging level for performance messages
        """
        start_time = time.time()
        self.logger.log(log_level, f"Starting {operation}")

        outcome = {"success": True}
        try:
            yield outcome
        except Exception as e:
            outcome["success"] = False
            self.logger.log(log_level, f"{operation} failed after {time.time() - start_time:.3f}s: {e}")
            raise
        finally:
            end_time = time.time()
            duration = end_time - start_time
            success = bool(outcome["success"])

            self._metrics.append(PerformanceMetrics(
                operation=operation,
                duration=duration,
                start_time=start_time,
                end_time=end_time,
                context=context,
                success=success
            ))

            if success:
                self.logger.log(log_level, f"{operation} completed in {duration:.3f}s")

                if context:
                    context_str = ", ".join(f"{k}={v}" for k, v in context.items())
                    self.logger.debug(f"{operation} context: {context_str}")
            else:
                self.logger.log(log_level, f"{operation} reported failure after {duration:.3f}s")

            if duration > 10.0:
                self.logger.warning(f"Slow git operation detected: '{operation}' took {duration:.3f}s")

    def get_performance_summary(self) -> Dict[str, Any]:
        """
        Get a summary of performance metrics.

        Returns:
            Dictionary containing performance summary
        """
        if not self._metrics:
            return {"total_operations": 0, "average_duration": 0.0}

        total_operations = len(self._metrics)
        total_duration = sum(m.duration for m in self._metrics)
        successful_ops = sum(1 for m in self._metrics if m.success)
        slowest_op = max(self._metrics, key=lambda m: m.duration)

        return {
            "total_operations": total_operations,
            "total_duration": total_duration,
            "average_duration": total_duration / total_operations,
            "success_rate": successful_ops / total_operations,
            "slowest_operation": {
                "name": slowest_op.operation,
                "duration": slowest_op.duration
            }
        }

    def log_performance_summary(self) -> None:
        """Log a summary of all performance metrics."""
        summary = self.get_performance_summary()

        if summary["total_operations"] == 0:
            self.logger.debug("No performance metrics available")
            return

        self.logger.debug(
            f"Performance Summary: {summary['total_operations']} operations, "
            f"avg {summary['average_duration']:.3f}s, "
            f"{summary['success_rate']:.1%} success rate"
        )

        slowest = summary["slowest_operation"]
        self.logger.debug(f"Slowest operation: {slowest['name']} ({slowest['duration']:.3f}s)")
