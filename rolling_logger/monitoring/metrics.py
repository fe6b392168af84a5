"""
Rotating log writer statistics
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Dict, Optional


@dataclass
class WriterStats:
    """
    Statistics collected by a rotating log writer.

    Counters are updated by the writer while it holds its lock; use
    snapshot() to read a consistent copy from another thread.
    """

    # Message counts
    messages_written: int = 0
    messages_dropped: int = 0

    # File lifecycle
    files_created: int = 0
    rollovers: int = 0
    files_pruned: int = 0

    # Failures
    write_failures: int = 0
    create_failures: int = 0
    prune_failures: int = 0
    name_collisions: int = 0
    alerts_raised: int = 0

    # Timing
    started_at: Optional[datetime] = None
    last_message_at: Optional[datetime] = None
    last_rollover_at: Optional[datetime] = None

    def record_write(self, moment: datetime) -> None:
        """Record a message that reached the active file."""
        self.messages_written += 1
        self.last_message_at = moment

    def record_drop(self) -> None:
        """Record a message that had nowhere to go."""
        self.messages_dropped += 1

    def record_rollover(self, moment: datetime) -> None:
        """Record a completed rollover."""
        self.rollovers += 1
        self.last_rollover_at = moment

    @property
    def total_failures(self) -> int:
        """All failures of any kind."""
        return self.write_failures + self.create_failures + self.prune_failures

    def snapshot(self) -> "WriterStats":
        """Return an independent copy."""
        return replace(self)

    def to_dict(self) -> Dict:
        """
        Convert to dictionary for JSON export.

        Returns:
            Dictionary representation of statistics
        """
        return {
            "messages_written": self.messages_written,
            "messages_dropped": self.messages_dropped,
            "files_created": self.files_created,
            "rollovers": self.rollovers,
            "files_pruned": self.files_pruned,
            "write_failures": self.write_failures,
            "create_failures": self.create_failures,
            "prune_failures": self.prune_failures,
            "name_collisions": self.name_collisions,
            "alerts_raised": self.alerts_raised,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "last_message_at": self.last_message_at.isoformat() if self.last_message_at else None,
            "last_rollover_at": self.last_rollover_at.isoformat() if self.last_rollover_at else None,
        }
