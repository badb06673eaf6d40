"""
Cache Metrics

Per-client operation counters exposed both as a plain snapshot (for the
stats endpoint) and as Prometheus metrics on a private registry.
"""

from dataclasses import dataclass
from typing import Any, Dict

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest


@dataclass
class CacheOperationCounters:
    """In-process counters for cache operations."""

    hits: int = 0
    misses: int = 0
    writes: int = 0
    rejected_writes: int = 0
    deletes: int = 0
    delete_misses: int = 0
    errors: int = 0
    timeouts: int = 0
    skipped_disabled: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate over all reads."""
        reads = self.hits + self.misses
        if reads == 0:
            return 0.0
        return self.hits / reads


class CacheMetrics:
    """Records cache outcomes in counters and Prometheus collectors."""

    def __init__(self, namespace: str = "storefront_cache"):
        self.counters = CacheOperationCounters()
        self.registry = CollectorRegistry()

        self.prom_operations_total = Counter(
            f"{namespace}_operations_total",
            "Total number of cache operations by outcome",
            ["operation", "outcome"],
            registry=self.registry,
        )
        self.prom_operation_duration_seconds = Histogram(
            f"{namespace}_operation_duration_seconds",
            "Cache operation execution time in seconds",
            ["operation"],
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
            registry=self.registry,
        )

    def record(self, operation: str, outcome: str, duration: float = 0.0) -> None:
        """Record one operation outcome.

        Outcomes: hit, miss, written, rejected, deleted, not_found, error,
        timeout, disabled. A delete that removed nothing is not_found.
        """
        if outcome == "hit":
            self.counters.hits += 1
        elif outcome == "miss":
            self.counters.misses += 1
        elif outcome == "written":
            self.counters.writes += 1
        elif outcome == "rejected":
            self.counters.rejected_writes += 1
        elif outcome == "deleted":
            self.counters.deletes += 1
        elif outcome == "not_found":
            self.counters.delete_misses += 1
        elif outcome == "timeout":
            self.counters.timeouts += 1
        elif outcome == "error":
            self.counters.errors += 1
        elif outcome == "disabled":
            self.counters.skipped_disabled += 1

        self.prom_operations_total.labels(operation=operation, outcome=outcome).inc()
        if duration:
            self.prom_operation_duration_seconds.labels(operation=operation).observe(
                duration
            )

    def snapshot(self) -> Dict[str, Any]:
        c = self.counters
        return {
            "hits": c.hits,
            "misses": c.misses,
            "hit_rate": round(c.hit_rate, 4),
            "writes": c.writes,
            "rejected_writes": c.rejected_writes,
            "deletes": c.deletes,
            "delete_misses": c.delete_misses,
            "errors": c.errors,
            "timeouts": c.timeouts,
            "skipped_disabled": c.skipped_disabled,
        }

    def export(self) -> str:
        """Render the registry in Prometheus text format."""
        return generate_latest(self.registry).decode("utf-8")
