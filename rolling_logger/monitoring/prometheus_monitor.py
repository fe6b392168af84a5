"""
Prometheus monitor implementation

Exports rotating log writer metrics to Prometheus format using
the prometheus_client library.
"""

from __future__ import annotations
from typing import Dict, Optional

# Optional dependency
try:
    from prometheus_client import Counter, Gauge, Histogram, REGISTRY
    HAS_PROMETHEUS = True
except ImportError:
    HAS_PROMETHEUS = False
    Counter = None
    Gauge = None
    Histogram = None
    REGISTRY = None


class PrometheusMonitor:
    """
    Export rotating log writer metrics to Prometheus.

    Requires prometheus_client package:
        pip install prometheus-client

    Example:
        from rolling_logger.monitoring import PrometheusMonitor

        monitor = PrometheusMonitor(prefix="updater_log")

        # Metrics available:
        # updater_log_messages_total
        # updater_log_dropped_total
        # updater_log_rollovers_total
        # updater_log_files_pruned_total
        # updater_log_errors_total{kind="write|create|prune"}
        # updater_log_alerts_total
        # updater_log_active_message_count
        # updater_log_degraded
        # updater_log_rollover_seconds
    """

    def __init__(
        self,
        prefix: str = "rolling_logger",
        registry=None
    ):
        """
        Initialize Prometheus monitor.

        Args:
            prefix: Metric name prefix
            registry: Optional custom registry (uses default if None)

        Raises:
            ImportError: If prometheus_client is not installed
        """
        if not HAS_PROMETHEUS:
            raise ImportError(
                "prometheus_client not installed. "
                "Install with: pip install prometheus-client"
            )

        self._registry = registry or REGISTRY

        self._counters = {
            "messages": Counter(
                f"{prefix}_messages_total",
                "Messages written to log files",
                registry=self._registry
            ),
            "dropped": Counter(
                f"{prefix}_dropped_total",
                "Messages dropped because no log file was open",
                registry=self._registry
            ),
            "rollovers": Counter(
                f"{prefix}_rollovers_total",
                "Completed log file rollovers",
                registry=self._registry
            ),
            "files_pruned": Counter(
                f"{prefix}_files_pruned_total",
                "Log files deleted by retention",
                registry=self._registry
            ),
            "alerts": Counter(
                f"{prefix}_alerts_total",
                "Operator alerts raised",
                registry=self._registry
            ),
        }

        self._errors_total = Counter(
            f"{prefix}_errors_total",
            "Writer failures by kind",
            ["kind"],
            registry=self._registry
        )

        self._gauges = {
            "active_message_count": Gauge(
                f"{prefix}_active_message_count",
                "Messages in the active log file",
                registry=self._registry
            ),
            "degraded": Gauge(
                f"{prefix}_degraded",
                "1 while the writer has no active log file",
                registry=self._registry
            ),
        }

        self._rollover_seconds = Histogram(
            f"{prefix}_rollover_seconds",
            "Time spent rolling over to a new log file",
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry
        )

    def record_counter(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        """Increment a writer counter; "errors" is split by its kind tag."""
        if name == "errors":
            kind = tags.get("kind", "unknown") if tags else "unknown"
            self._errors_total.labels(kind=kind).inc(value)
        elif name in self._counters:
            self._counters[name].inc(value)

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        if name in self._gauges:
            self._gauges[name].set(value)

    def record_histogram(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        """Observe a rollover latency reported in milliseconds."""
        if name == "rollover_latency":
            self._rollover_seconds.observe(value / 1000.0)
