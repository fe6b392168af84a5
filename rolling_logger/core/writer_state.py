"""
Writer state enumeration
"""

from enum import Enum
from typing import Dict, FrozenSet


class WriterState(Enum):
    """
    Lifecycle state of a rotating log writer.

    UNINITIALIZED -> ACTIVE on open, ACTIVE -> ACTIVE on rollover,
    ACTIVE -> DEGRADED when a replacement file cannot be created,
    DEGRADED -> ACTIVE on a successful recover(), and any state -> CLOSED.
    """

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DEGRADED = "degraded"
    CLOSED = "closed"

    def __str__(self) -> str:
        """String representation of writer state."""
        return self.value

    @property
    def accepts_writes(self) -> bool:
        """Whether messages written in this state reach a file."""
        return self is WriterState.ACTIVE

    @property
    def is_terminal(self) -> bool:
        """Whether no further transitions are possible."""
        return self is WriterState.CLOSED

    def can_transition_to(self, target: "WriterState") -> bool:
        """
        Check whether moving to ``target`` is a legal transition.

        Args:
            target: Requested next state

        Returns:
            True if the state machine allows the move
        """
        return target in TRANSITIONS[self]


TRANSITIONS: Dict[WriterState, FrozenSet[WriterState]] = {
    WriterState.UNINITIALIZED: frozenset(
        {WriterState.ACTIVE, WriterState.DEGRADED, WriterState.CLOSED}
    ),
    WriterState.ACTIVE: frozenset(
        {WriterState.ACTIVE, WriterState.DEGRADED, WriterState.CLOSED}
    ),
    WriterState.DEGRADED: frozenset(
        {WriterState.ACTIVE, WriterState.DEGRADED, WriterState.CLOSED}
    ),
    WriterState.CLOSED: frozenset({WriterState.CLOSED}),
}
