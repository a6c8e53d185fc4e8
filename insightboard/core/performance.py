"""
Performance monitoring and metrics collection.
"""
import inspect
import time
import logging
from typing import Dict, Optional, Any
from functools import wraps
from collections import defaultdict
import threading

from insightboard.core.errors import AnalysisError

logger = logging.getLogger(__name__)

# Keep only the most recent samples per metric
MAX_SAMPLES = 1000

# Thread-safe metrics storage
_metrics_lock = threading.Lock()
_metrics: Dict[str, list] = defaultdict(list)


class PerformanceMonitor:
    """Monitor and track performance metrics."""

    @staticmethod
    def record_metric(name: str, value: float, metadata: Optional[Dict[str, Any]] = None):
        """
        Record a performance metric.

        Args:
            name: Metric name (e.g., 'parse_file', 'analyze_dataset')
            value: Metric value (usually duration in seconds)
            metadata: Optional metadata (correlation_id, status, etc.)
        """
        with _metrics_lock:
            _metrics[name].append({
                'value': value,
                'timestamp': time.time(),
                'metadata': metadata or {}
            })
            if len(_metrics[name]) > MAX_SAMPLES:
                _metrics[name] = _metrics[name][-MAX_SAMPLES:]

    @staticmethod
    def _stats_for(samples: list) -> Dict[str, float]:
        values = sorted(m['value'] for m in samples)
        return {
            'count': len(values),
            'min': values[0],
            'max': values[-1],
            'mean': sum(values) / len(values),
            'p50': values[len(values) // 2],
            'p95': values[int(len(values) * 0.95)],
            'errors': sum(1 for m in samples if m['metadata'].get('status') == 'error'),
        }

    @staticmethod
    def get_stats(metric_name: str) -> Optional[Dict[str, float]]:
        """
        Get statistics for a metric.

        Returns:
            Dict with count, min, max, mean, percentiles and error count, or None if no data
        """
        with _metrics_lock:
            samples = _metrics.get(metric_name)
            if not samples:
                return None
            return PerformanceMonitor._stats_for(samples)

    @staticmethod
    def get_all_metrics() -> Dict[str, Dict[str, float]]:
        """Get statistics for all metrics."""
        with _metrics_lock:
            return {
                name: PerformanceMonitor._stats_for(samples)
                for name, samples in _metrics.items()
                if samples
            }

    @staticmethod
    def clear_metrics():
        """Clear all metrics (useful for testing)."""
        with _metrics_lock:
            _metrics.clear()


def _record_outcome(metric_name: str, start_time: float, error: Optional[Exception] = None):
    duration = time.perf_counter() - start_time
    if error is None:
        PerformanceMonitor.record_metric(metric_name, duration, {'status': 'success'})
        logger.debug(
            f"{metric_name} completed in {duration:.3f}s",
            extra={'metric': metric_name, 'duration': duration}
        )
        return

    PerformanceMonitor.record_metric(metric_name, duration, {'status': 'error', 'error': str(error)})
    if isinstance(error, AnalysisError):
        # Bad input, not a server fault
        logger.warning(
            f"{metric_name} rejected input after {duration:.3f}s: {error}",
            extra={'metric': metric_name, 'duration': duration}
        )
    else:
        logger.error(
            f"{metric_name} failed after {duration:.3f}s: {error}",
            extra={'metric': metric_name, 'duration': duration},
            exc_info=True
        )


def track_performance(metric_name: str):
    """
    Decorator to track function execution time.

    Usage:
        @track_performance("parse_file")
        async def parse_upload(...):
            ...
    """
    def decorator(func):
        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                _record_outcome(metric_name, start_time, e)
                raise
            _record_outcome(metric_name, start_time)
            return result

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                _record_outcome(metric_name, start_time, e)
                raise
            _record_outcome(metric_name, start_time)
            return result

        if inspect.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
