"""
Page cache metrics collection.

This module tracks, per process:
- Cache hits, misses and expirations on the read path
- Body writes, write errors and skipped writes on the write path
- Invalidations and flushes
- Error counts by type

The counters are exposed by the cache status API and can be exported in
Prometheus text format.
"""

import logging
import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict

logger = logging.getLogger(__name__)


class CacheMetrics:
    """
    Collects and tracks page cache metrics.

    Example Usage:
        >>> metrics = CacheMetrics()
        >>> metrics.record('cache_hit')
        >>> metrics.record('cache_miss')
        >>> with metrics.measure_latency('serve_hit'):
        ...     pass
        >>> metrics.get_stats()['hit_rate']
        0.5
    """

    def __init__(self):
        """Initialize the metrics collector."""
        self._lock = threading.Lock()
        self._operation_counts: Dict[str, int] = defaultdict(int)
        self._operation_latencies: Dict[str, list] = defaultdict(list)
        self._error_counts: Dict[str, int] = defaultdict(int)

    def record(self, operation: str, count: int = 1) -> None:
        """
        Record ``count`` occurrences of an operation.

        Known operations: cache_hit, cache_miss, cache_expired, write,
        write_skipped, invalidation, flush.
        """
        with self._lock:
            self._operation_counts[operation] += count

        logger.debug(f"Metric recorded - operation={operation}, count={count}")

    def record_error(self, error_type: str) -> None:
        """
        Record a cache error event.

        Args:
            error_type: Type of error (e.g., 'write', 'lookup', 'invalidation')
        """
        with self._lock:
            self._error_counts[error_type] += 1

        logger.debug(f"Metric recorded - operation=error, error_type={error_type}")

    @contextmanager
    def measure_latency(self, operation: str):
        """Context manager measuring the latency of ``operation`` in milliseconds."""
        start_time = time.time()

        try:
            yield
        finally:
            latency_ms = (time.time() - start_time) * 1000
            with self._lock:
                self._operation_latencies[operation].append(latency_ms)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with:
            - hit_rate: hits / (hits + misses), 0.0 when there was no lookup
            - operation_counts: Count of each operation type
            - error_counts: Count of each error type
            - avg_latencies: Average latency per operation type (ms)
        """
        with self._lock:
            counts = dict(self._operation_counts)
            errors = dict(self._error_counts)
            avg_latencies = {
                operation: sum(latencies) / len(latencies)
                for operation, latencies in self._operation_latencies.items()
                if latencies
            }

        hits = counts.get('cache_hit', 0)
        lookups = hits + counts.get('cache_miss', 0)

        return {
            'hit_rate': hits / lookups if lookups else 0.0,
            'operation_counts': counts,
            'error_counts': errors,
            'avg_latencies': avg_latencies,
        }

    def reset(self) -> None:
        """Reset all metrics to zero."""
        with self._lock:
            self._operation_counts.clear()
            self._operation_latencies.clear()
            self._error_counts.clear()

        logger.info("Cache metrics reset")

    def export_prometheus(self) -> str:
        """Export metrics in Prometheus exposition format."""
        stats = self.get_stats()
        lines = []

        lines.append("# HELP htmlcache_operations_total Total number of page cache operations")
        lines.append("# TYPE htmlcache_operations_total counter")
        for operation, count in sorted(stats['operation_counts'].items()):
            lines.append(f'htmlcache_operations_total{{operation="{operation}"}} {count}')

        lines.append("# HELP htmlcache_errors_total Total number of page cache errors")
        lines.append("# TYPE htmlcache_errors_total counter")
        for error_type, count in sorted(stats['error_counts'].items()):
            lines.append(f'htmlcache_errors_total{{error_type="{error_type}"}} {count}')

        lines.append("# HELP htmlcache_hit_rate Page cache hit rate")
        lines.append("# TYPE htmlcache_hit_rate gauge")
        lines.append(f"htmlcache_hit_rate {stats['hit_rate']:.4f}")

        return '\n'.join(lines) + '\n'


# Singleton instance for easy import
cache_metrics = CacheMetrics()
