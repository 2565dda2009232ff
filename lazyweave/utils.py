"""
Instrumentation helpers for lazyweave

Utilities for checking laziness and measuring pipelines: a pull-counting
iterator and a small time/memory tracker.
"""

import gc
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional


class CountingIterator:
    """Iterator that records how many elements were pulled from ``iterable``"""

    def __init__(self, iterable: Iterable):
        self._it = iter(iterable)
        self.pulls = 0
        self.exhausted = False

    def __iter__(self):
        return self

    def __next__(self):
        try:
            value = next(self._it)
        except StopIteration:
            self.exhausted = True
            raise
        self.pulls += 1
        return value


@dataclass
class OperationRecord:
    """Timing and memory of one measured operation"""
    operation: str
    execution_time_ms: float
    memory_usage_mb: float
    success: bool
    result_size: Optional[int] = None
    error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation,
            "execution_time_ms": self.execution_time_ms,
            "memory_usage_mb": self.memory_usage_mb,
            "success": self.success,
            "result_size": self.result_size,
            "error": self.error,
            "timestamp": self.timestamp,
        }


class PerformanceTracker:
    """Collects OperationRecords for a series of measured calls"""

    def __init__(self):
        self.operations: List[OperationRecord] = []

    def measure(self, operation_name: str, func: Callable, *args, **kwargs) -> OperationRecord:
        """Measure performance of a function call with memory tracking"""
        tracemalloc.start()
        gc.collect()
        start_time = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            self._record(operation_name, start_time, success=False, error=str(e))
            raise
        else:
            try:
                size = len(result)
            except TypeError:
                size = None
            record = self._record(operation_name, start_time, success=True, result_size=size)
        finally:
            tracemalloc.stop()
        return record

    def _record(self, operation_name: str, start_time: float, **extra) -> OperationRecord:
        execution_time_ms = (time.perf_counter() - start_time) * 1000
        _, peak = tracemalloc.get_traced_memory()
        record = OperationRecord(
            operation=operation_name,
            execution_time_ms=execution_time_ms,
            memory_usage_mb=peak / 1024 / 1024,
            **extra,
        )
        self.operations.append(record)
        return record

    def summary(self) -> Dict[str, Any]:
        """Get summary of all performance metrics"""
        count = len(self.operations)
        total_time = sum(op.execution_time_ms for op in self.operations)
        total_memory = sum(op.memory_usage_mb for op in self.operations)
        return {
            "total_operations": count,
            "total_time_ms": total_time,
            "total_memory_mb": total_memory,
            "avg_time_ms": total_time / count if count else 0.0,
            "avg_memory_mb": total_memory / count if count else 0.0,
        }

    def clear(self) -> None:
        self.operations = []
