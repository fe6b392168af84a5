"""
Log file naming

Names have the form ``"<base_name> <timestamp>"`` with an optional
``-NNN`` disambiguator. The timestamp is fixed width and zero padded so
sorting names lexicographically sorts them chronologically.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

SEPARATOR = " "
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S.%f"
SEQUENCE_WIDTH = 3
MAX_SEQUENCE = 10 ** SEQUENCE_WIDTH - 1

_TIMESTAMP_PATTERN = r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.\d{6}"
_SUFFIX_PATTERN = r"(?:-(?P<sequence>\d{%d}))?" % SEQUENCE_WIDTH


def format_timestamp(moment: datetime) -> str:
    """Format a datetime using the on-disk timestamp layout."""
    return moment.strftime(TIMESTAMP_FORMAT)


def generate_name(
    base_name: str,
    now: Optional[datetime] = None,
    sequence: int = 0
) -> str:
    """
    Generate a log file name for ``base_name``.

    Args:
        base_name: Prefix shared by all files of one log stream
        now: Creation time to embed (default: current time)
        sequence: Disambiguator for names whose timestamp collided;
            0 means no suffix

    Returns:
        File name (no directory component)

    Raises:
        ValueError: If sequence is out of range
    """
    if sequence < 0 or sequence > MAX_SEQUENCE:
        raise ValueError(f"sequence must be between 0 and {MAX_SEQUENCE}")

    moment = now if now is not None else datetime.now()
    name = f"{base_name}{SEPARATOR}{format_timestamp(moment)}"
    if sequence:
        name = f"{name}-{sequence:0{SEQUENCE_WIDTH}d}"
    return name


def _name_regex(base_name: str) -> "re.Pattern":
    return re.compile(
        re.escape(base_name + SEPARATOR)
        + r"(?P<timestamp>" + _TIMESTAMP_PATTERN + r")"
        + _SUFFIX_PATTERN
        + r"$"
    )


def parse_timestamp(base_name: str, file_name: str) -> Optional[datetime]:
    """
    Extract the creation time embedded in a log file name.

    Args:
        base_name: Expected base name
        file_name: Name to inspect (no directory component)

    Returns:
        Embedded datetime, or None if the name does not belong to base_name
    """
    match = _name_regex(base_name).match(file_name)
    if not match:
        return None
    try:
        return datetime.strptime(match.group("timestamp"), TIMESTAMP_FORMAT)
    except ValueError:
        return None


def is_log_file(base_name: str, file_name: str) -> bool:
    """Check whether ``file_name`` was generated for ``base_name``."""
    return parse_timestamp(base_name, file_name) is not None
