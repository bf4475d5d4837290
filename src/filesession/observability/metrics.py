"""Prometheus metrics collection for the record store.

This module provides Prometheus metrics for tracking read outcomes, write
and delete results, and sweep activity.
"""

from typing import Optional

from prometheus_client import Counter, Histogram, generate_latest

# Read metrics (outcome: found, not_found, corrupt, expired)
record_reads_total = Counter(
    "filesession_reads_total",
    "Total number of record reads by outcome",
    labelnames=["outcome"],
)

# Write metrics
record_writes_total = Counter(
    "filesession_writes_total",
    "Total number of record writes",
    labelnames=["status"],
)

# Delete metrics
record_deletes_total = Counter(
    "filesession_deletes_total",
    "Total number of record file deletions",
    labelnames=["status"],
)

# Sweep metrics
sweeps_total = Counter(
    "filesession_sweeps_total",
    "Total number of storage directory sweeps",
)

sweep_duration_seconds = Histogram(
    "filesession_sweep_duration_seconds",
    "Storage directory sweep duration in seconds",
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 30.0],
)


class MetricsCollector:
    """Collects and exposes Prometheus metrics.

    Provides methods for recording record reads, writes, deletes and sweeps.
    """

    def record_read(self, outcome: str) -> None:
        """Record a read and its outcome.

        Args:
            outcome: Read outcome (found, not_found, corrupt, expired)

        Example:
            >>> get_metrics_collector().record_read("expired")
        """
        record_reads_total.labels(outcome=outcome).inc()

    def record_write(self, status: str) -> None:
        """Record a write attempt.

        Args:
            status: Write status (success, failed)
        """
        record_writes_total.labels(status=status).inc()

    def record_delete(self, status: str) -> None:
        """Record a delete attempt.

        Args:
            status: Delete status (deleted, missing, failed)
        """
        record_deletes_total.labels(status=status).inc()

    def record_sweep(self, duration_seconds: float) -> None:
        """Record a completed sweep.

        Args:
            duration_seconds: Sweep duration in seconds

        Example:
            >>> get_metrics_collector().record_sweep(0.25)
        """
        sweeps_total.inc()
        sweep_duration_seconds.observe(duration_seconds)

    def generate_metrics(self) -> bytes:
        """Generate Prometheus metrics in text format.

        Returns:
            Metrics in Prometheus exposition format
        """
        return generate_latest()


# Singleton instance
_metrics_collector: Optional[MetricsCollector] = None


def get_metrics_collector() -> MetricsCollector:
    """Get the global MetricsCollector instance.

    Returns:
        Singleton MetricsCollector instance
    """
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector
