"""
Safety module - Operator alerting

Provides the hook a rotating log writer calls when it is left without
an active log file:
- OperatorAlert carrying recent files and a status report
- AlertDispatcher isolating handler failures
- log_alert, the default logging-based handler
"""

from rolling_logger.safety.alerts import (
    AlertDispatcher,
    AlertHandler,
    OperatorAlert,
    RECENT_FILE_COUNT,
    log_alert,
)

__all__ = [
    "AlertDispatcher",
    "AlertHandler",
    "OperatorAlert",
    "RECENT_FILE_COUNT",
    "log_alert",
]
