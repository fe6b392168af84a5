"""
Error taxonomy for the rotating log writer

Every error carries the path it concerns and the underlying cause
(usually an ``OSError``) so callers and alert handlers can report both.
"""

from __future__ import annotations

from typing import Optional


class RotatingLogError(Exception):
    """Base class for all rotating log writer errors."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        text = super().__str__()
        if self.path:
            text = f"{text}: {self.path}"
        if self.cause is not None:
            text = f"{text} ({self.cause})"
        return text


class CreateFailure(RotatingLogError):
    """The file system refused to create a new log file."""


class WriteFailure(RotatingLogError):
    """A message could not be written to the active log file."""


class PruneFailure(RotatingLogError):
    """A retired log file could not be deleted."""


class NameCollision(RotatingLogError):
    """A generated log file name already exists on disk."""
