"""
Operator alerts

Raised when a writer is left without an active log file. Subsequent
messages have nowhere to go until someone intervenes, so the alert
carries enough context (recent files, status report) to act on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

# Number of most recent log files attached to an alert
RECENT_FILE_COUNT = 3


@dataclass
class OperatorAlert:
    """Context handed to alert handlers."""

    reason: str
    base_name: str
    error: Optional[BaseException] = None
    recent_files: List[Path] = field(default_factory=list)
    status: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def summary(self) -> str:
        """One-line description for log output."""
        text = f"Log writer {self.base_name!r}: {self.reason}"
        if self.error is not None:
            text = f"{text}: {self.error}"
        return text

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert alert to dictionary.

        Returns:
            Dictionary representation suitable for JSON export
        """
        return {
            "reason": self.reason,
            "base_name": self.base_name,
            "error": str(self.error) if self.error is not None else None,
            "recent_files": [str(path) for path in self.recent_files],
            "status": self.status,
            "timestamp": self.timestamp.isoformat(),
        }


AlertHandler = Callable[[OperatorAlert], None]


def log_alert(alert: OperatorAlert) -> None:
    """Default alert handler: report through the logging system."""
    logger.critical(
        "%s (recent files: %s)",
        alert.summary(),
        ", ".join(path.name for path in alert.recent_files) or "none",
    )


class AlertDispatcher:
    """
    Deliver operator alerts to a set of handlers.

    A handler that raises does not prevent the others from running, and
    never propagates into the writer.
    """

    def __init__(self, handlers: Optional[List[AlertHandler]] = None):
        """
        Initialize dispatcher.

        Args:
            handlers: Alert handlers (default: log_alert only)
        """
        self._handlers: List[AlertHandler] = list(handlers) if handlers else [log_alert]
        self.alerts_sent = 0

    def add_handler(self, handler: AlertHandler) -> None:
        """Register an additional handler."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers.append(handler)

    def dispatch(self, alert: OperatorAlert) -> None:
        """Send the alert to every handler."""
        self.alerts_sent += 1
        for handler in self._handlers:
            try:
                handler(alert)
            except Exception:
                logger.exception("Alert handler %r failed", handler)
