"""Rotation decision"""


def should_rotate(
    message_count: int,
    elapsed_seconds: float,
    max_message_count: int,
    max_duration: float
) -> bool:
    """
    Decide whether the active file must be rolled over.

    Either threshold trips on its own. Both comparisons are strictly
    greater, so a file holding exactly ``max_message_count`` messages
    is not rotated.

    Args:
        message_count: Messages written to the active file
        elapsed_seconds: Seconds since the active file was opened
        max_message_count: Message threshold
        max_duration: Duration threshold in seconds

    Returns:
        True if rollover is due
    """
    return message_count > max_message_count or elapsed_seconds > max_duration


class RotationPolicy:
    """Rotation thresholds bound to a writer."""

    def __init__(self, max_message_count: int, max_duration: float):
        """
        Initialize rotation policy.

        Args:
            max_message_count: Rotate once more than this many messages
                have been written to one file
            max_duration: Rotate once a file has been open longer than
                this many seconds
        """
        self.max_message_count = max_message_count
        self.max_duration = max_duration

    def check(self, message_count: int, elapsed_seconds: float) -> bool:
        """Apply the thresholds to the current counters."""
        return should_rotate(
            message_count,
            elapsed_seconds,
            self.max_message_count,
            self.max_duration,
        )

    def __repr__(self) -> str:
        return (
            f"RotationPolicy(max_message_count={self.max_message_count}, "
            f"max_duration={self.max_duration})"
        )
