"""Observability module for the record store.

This module provides:
- Structured logging with per-operation context
- Prometheus metrics for reads, writes, deletes and sweeps
"""

from filesession.observability.logging import get_logger, operation_context, setup_logging
from filesession.observability.metrics import MetricsCollector, get_metrics_collector

__all__ = [
    "setup_logging",
    "get_logger",
    "operation_context",
    "MetricsCollector",
    "get_metrics_collector",
]
