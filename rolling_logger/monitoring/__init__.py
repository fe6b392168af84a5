"""
Monitoring module for writer metrics and health checks

Example:
    from rolling_logger import RotatingLogWriterBuilder
    from rolling_logger.monitoring import HealthChecker, InMemoryMonitor

    monitor = InMemoryMonitor()

    writer = (RotatingLogWriterBuilder()
        .with_base_name("updater")
        .with_max_message_count(1000)
        .with_max_duration(3600)
        .with_max_file_count(5)
        .with_monitoring(monitor)
        .build())

    # Health check
    health = HealthChecker(writer)
    result = health.check()
    print(f"Status: {result.status.value}")
"""

from rolling_logger.monitoring.metrics import WriterStats
from rolling_logger.monitoring.monitor import (
    Monitor,
    NullMonitor,
    InMemoryMonitor,
)
from rolling_logger.monitoring.health_checker import (
    HealthChecker,
    HealthCheckResult,
    HealthStatus,
    LivenessChecker,
    ReadinessChecker,
)
from rolling_logger.monitoring.prometheus_monitor import (
    PrometheusMonitor,
    HAS_PROMETHEUS,
)

__all__ = [
    # Statistics
    "WriterStats",
    # Monitor interfaces
    "Monitor",
    "NullMonitor",
    "InMemoryMonitor",
    # Optional monitors
    "PrometheusMonitor",
    "HAS_PROMETHEUS",
    # Health checks
    "HealthChecker",
    "HealthCheckResult",
    "HealthStatus",
    "LivenessChecker",
    "ReadinessChecker",
]
