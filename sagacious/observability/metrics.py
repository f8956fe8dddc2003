"""
Metrics collection for SAGACIOUS.

Tracks latency and error counts for repository and connection operations.
Each (operation, tags) pair gets its own OperationMetrics entry; the
collector keeps at most ``max_metrics`` entries and drops the least
recently touched one when full.
"""

import functools
import inspect
import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


def _metric_key(operation_name: str, tags: dict[str, Any]) -> str:
    if not tags:
        return operation_name
    rendered = "_".join(f"{name}={value}" for name, value in sorted(tags.items()))
    return f"{operation_name}[{rendered}]"


@dataclass
class OperationMetrics:
    """Running latency and failure totals for one metric key."""

    operation_name: str
    count: int = 0
    error_count: int = 0
    total_duration_ms: float = 0.0
    min_duration_ms: float = float("inf")
    max_duration_ms: float = 0.0
    last_execution: datetime | None = field(default=None)

    @property
    def avg_duration_ms(self) -> float:
        if not self.count:
            return 0.0
        return self.total_duration_ms / self.count

    @property
    def error_rate(self) -> float:
        """Failed executions as a percentage of all executions."""
        if not self.count:
            return 0.0
        return 100.0 * self.error_count / self.count

    def record(self, duration_ms: float, success: bool = True) -> None:
        self.count += 1
        self.error_count += 0 if success else 1
        self.total_duration_ms += duration_ms
        self.min_duration_ms = min(self.min_duration_ms, duration_ms)
        self.max_duration_ms = max(self.max_duration_ms, duration_ms)
        self.last_execution = datetime.now()

    def merge(self, other: "OperationMetrics") -> None:
        """Fold another entry's totals into this one."""
        self.count += other.count
        self.error_count += other.error_count
        self.total_duration_ms += other.total_duration_ms
        self.min_duration_ms = min(self.min_duration_ms, other.min_duration_ms)
        self.max_duration_ms = max(self.max_duration_ms, other.max_duration_ms)
        if other.last_execution is not None and (
            self.last_execution is None or other.last_execution > self.last_execution
        ):
            self.last_execution = other.last_execution

    def to_dict(self) -> dict[str, Any]:
        min_duration = 0.0 if self.min_duration_ms == float("inf") else self.min_duration_ms
        return {
            "operation": self.operation_name,
            "count": self.count,
            "avg_duration_ms": round(self.avg_duration_ms, 2),
            "min_duration_ms": round(min_duration, 2),
            "max_duration_ms": round(self.max_duration_ms, 2),
            "error_count": self.error_count,
            "error_rate_percent": round(self.error_rate, 2),
            "last_execution": self.last_execution.isoformat() if self.last_execution else None,
        }


class MetricsCollector:
    """
    Thread-safe in-process metrics store.

    Keys look like ``repository.get[collection=shop.orders]``. Reading a key
    counts as a use for eviction purposes.
    """

    def __init__(self, max_metrics: int = 10000):
        self._metrics: OrderedDict[str, OperationMetrics] = OrderedDict()
        self._lock = threading.Lock()
        self._max_metrics = max_metrics

    def record_operation(
        self, operation_name: str, duration_ms: float, success: bool = True, **tags: Any
    ) -> None:
        """
        Record one execution of ``operation_name``.

        Args:
            operation_name: Dotted operation name (e.g., "repository.save")
            duration_ms: Duration in milliseconds
            success: Whether the execution succeeded
            **tags: Extra dimensions folded into the metric key
        """
        key = _metric_key(operation_name, tags)
        with self._lock:
            entry = self._metrics.get(key)
            if entry is None:
                if len(self._metrics) >= self._max_metrics:
                    evicted, _ = self._metrics.popitem(last=False)
                    logger.debug(f"Evicted metric {evicted}")
                entry = self._metrics[key] = OperationMetrics(operation_name=operation_name)
            else:
                self._metrics.move_to_end(key)
            entry.record(duration_ms, success)

    def _snapshot(self, keys: Iterable[str]) -> dict[str, dict[str, Any]]:
        snapshot = {}
        for key in keys:
            snapshot[key] = self._metrics[key].to_dict()
            self._metrics.move_to_end(key)
        return snapshot

    def get_metrics(self, operation_name: str | None = None) -> dict[str, Any]:
        """
        Per-key metrics, optionally limited to keys starting with ``operation_name``.
        """
        with self._lock:
            keys = [
                key
                for key in self._metrics
                if operation_name is None or key.startswith(operation_name)
            ]
            metrics = self._snapshot(keys)
            total = len(self._metrics)

        return {
            "timestamp": datetime.now().isoformat(),
            "metrics": metrics,
            "total_operations": total,
        }

    def get_summary(self) -> dict[str, Any]:
        """Metrics aggregated per operation name, with tags dropped."""
        with self._lock:
            aggregated: dict[str, OperationMetrics] = {}
            for entry in self._metrics.values():
                name = entry.operation_name
                aggregated.setdefault(name, OperationMetrics(operation_name=name)).merge(entry)
            total = len(self._metrics)

        return {
            "timestamp": datetime.now().isoformat(),
            "total_operations": total,
            "summary": {name: entry.to_dict() for name, entry in aggregated.items()},
        }

    def get_operation_count(self, operation_name: str) -> int:
        """Executions of ``operation_name`` summed over all tag combinations."""
        with self._lock:
            return sum(
                entry.count
                for entry in self._metrics.values()
                if entry.operation_name == operation_name
            )

    def reset(self) -> None:
        with self._lock:
            self._metrics.clear()


_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Return the process-wide collector, creating it on first use."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector


def record_operation(
    operation_name: str, duration_ms: float, success: bool = True, **tags: Any
) -> None:
    """Record an execution in the process-wide collector."""
    get_metrics_collector().record_operation(operation_name, duration_ms, success, **tags)


def timed_operation(operation_name: str, **tags: Any):
    """
    Decorator that times a function and records it as ``operation_name``.

    Works on plain and coroutine functions. An exception counts as a failed
    execution and propagates unchanged.

    Usage:
        @timed_operation("connection.shutdown")
        async def shutdown(self):
            ...
    """

    def decorator(func: Callable) -> Callable:
        def finish(start_time: float, success: bool) -> None:
            record_operation(operation_name, (time.time() - start_time) * 1000, success, **tags)

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs):
                start_time = time.time()
                try:
                    result = await func(*args, **kwargs)
                except Exception:
                    finish(start_time, False)
                    raise
                finish(start_time, True)
                return result

            return async_wrapper

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                result = func(*args, **kwargs)
            except Exception:
                finish(start_time, False)
                raise
            finish(start_time, True)
            return result

        return sync_wrapper

    return decorator
