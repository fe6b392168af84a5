"""
Health check functionality for rotating log writers

Provides health status checks for monitoring writer state and
detecting lost messages or retention problems.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Tuple
from datetime import datetime

from rolling_logger.core.writer_state import WriterState

if TYPE_CHECKING:
    from rolling_logger.core.log_writer import RotatingLogWriter
    from rolling_logger.monitoring.metrics import WriterStats


class HealthStatus(Enum):
    """Health status enumeration."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class HealthCheckResult:
    """
    Result of a health check.

    Contains status, issues found, and details about
    the current health of the writer.
    """
    status: HealthStatus
    issues: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict:
        """
        Convert to dictionary for JSON export.

        Returns:
            Dictionary representation
        """
        return {
            "status": self.status.value,
            "issues": self.issues,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    @property
    def is_healthy(self) -> bool:
        """Check if status is healthy."""
        return self.status == HealthStatus.HEALTHY


class HealthChecker:
    """
    Check rotating log writer health.

    Looks at the writer state, write failure rate, dropped messages
    and retention failures to determine overall health.

    Example:
        from rolling_logger.monitoring import HealthChecker

        health = HealthChecker(writer)
        result = health.check()

        if not result.is_healthy:
            print(f"Issues: {result.issues}")
    """

    def __init__(
        self,
        writer: "RotatingLogWriter",
        max_error_rate: float = 0.01
    ):
        """
        Initialize health checker.

        Args:
            writer: Writer instance to monitor
            max_error_rate: Maximum acceptable write failure rate (0-1)
        """
        self._writer = writer
        self.max_error_rate = max_error_rate

    def check(self) -> HealthCheckResult:
        """
        Perform health check.

        Returns:
            HealthCheckResult with status and any issues found
        """
        stats = self._writer.stats
        issues: List[str] = []
        details: Dict[str, Any] = {}

        state_status = self._check_state(issues, details)
        error_status = self._check_error_rate(stats, issues, details)
        dropped_status = self._check_dropped(stats, issues, details)
        retention_status = self._check_retention(stats, issues, details)

        status = self._determine_status(
            state_status,
            error_status,
            dropped_status,
            retention_status
        )

        details["stats"] = stats.to_dict()

        return HealthCheckResult(
            status=status,
            issues=issues,
            details=details
        )

    def _check_state(
        self,
        issues: List[str],
        details: Dict[str, Any]
    ) -> HealthStatus:
        """Check writer lifecycle state."""
        state = self._writer.state
        details["state"] = state.value
        active = self._writer.active_path
        details["active_file"] = str(active) if active else None

        if state is WriterState.DEGRADED:
            issues.append("no_active_file")
            return HealthStatus.UNHEALTHY
        if state is WriterState.CLOSED:
            issues.append("writer_closed")
            return HealthStatus.UNHEALTHY
        if state is WriterState.UNINITIALIZED:
            issues.append("writer_not_opened")
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def _check_error_rate(
        self,
        stats: "WriterStats",
        issues: List[str],
        details: Dict[str, Any]
    ) -> HealthStatus:
        """Check write failure rate."""
        attempts = stats.messages_written + stats.write_failures
        if attempts == 0:
            details["error_rate"] = 0.0
            return HealthStatus.HEALTHY

        error_rate = stats.write_failures / attempts
        details["error_rate"] = error_rate

        if error_rate >= self.max_error_rate:
            issues.append("high_error_rate")
            return HealthStatus.UNHEALTHY
        elif error_rate >= self.max_error_rate * 0.5:
            issues.append("elevated_error_rate")
            return HealthStatus.DEGRADED

        return HealthStatus.HEALTHY

    def _check_dropped(
        self,
        stats: "WriterStats",
        issues: List[str],
        details: Dict[str, Any]
    ) -> HealthStatus:
        """Check for messages that never reached a file."""
        details["dropped_messages"] = stats.messages_dropped
        if stats.messages_dropped > 0:
            issues.append("messages_dropped")
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def _check_retention(
        self,
        stats: "WriterStats",
        issues: List[str],
        details: Dict[str, Any]
    ) -> HealthStatus:
        """Check for old files that could not be pruned."""
        details["prune_failures"] = stats.prune_failures
        if stats.prune_failures > 0:
            issues.append("prune_failures")
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    def _determine_status(self, *statuses: HealthStatus) -> HealthStatus:
        """Determine overall status from individual checks."""
        if HealthStatus.UNHEALTHY in statuses:
            return HealthStatus.UNHEALTHY
        elif HealthStatus.DEGRADED in statuses:
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY


class LivenessChecker:
    """
    Simple liveness check.

    A writer is alive until it has been closed.
    """

    def __init__(self, writer: "RotatingLogWriter"):
        self._writer = writer

    def check(self) -> Tuple[bool, str]:
        """
        Check if writer is alive.

        Returns:
            Tuple of (is_alive, reason)
        """
        if self._writer is None:
            return False, "writer_not_initialized"
        if self._writer.state is WriterState.CLOSED:
            return False, "writer_closed"
        return True, "ok"


class ReadinessChecker:
    """
    Readiness check.

    A writer is ready when it has an active file to write to.
    """

    def __init__(self, writer: "RotatingLogWriter"):
        self._writer = writer

    def check(self) -> Tuple[bool, str]:
        """
        Check if writer is ready.

        Returns:
            Tuple of (is_ready, reason)
        """
        alive, reason = LivenessChecker(self._writer).check()
        if not alive:
            return False, reason
        if self._writer.state is not WriterState.ACTIVE:
            return False, f"writer_{self._writer.state.value}"
        return True, "ok"
