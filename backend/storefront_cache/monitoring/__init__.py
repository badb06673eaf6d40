"""
Cache monitoring: operation counters and Prometheus export.
"""

from .cache_metrics import CacheMetrics, CacheOperationCounters

__all__ = ["CacheMetrics", "CacheOperationCounters"]
