"""
Core module for the rotating log writer

This module contains the fundamental classes:
- RotatingLogWriter: Writer owning the active file, rollover and retention
- RotatingLogWriterBuilder: Builder pattern for writer construction
- RotationConfig: Configuration management
- WriterState: Writer lifecycle states
- LocalFileSystem: File creation, listing and deletion
"""

from rolling_logger.core.log_writer import RotatingLogWriter
from rolling_logger.core.writer_builder import RotatingLogWriterBuilder
from rolling_logger.core.rotation_config import RotationConfig
from rolling_logger.core.writer_state import WriterState
from rolling_logger.core.filesystem import LocalFileSystem

__all__ = [
    "RotatingLogWriter",
    "RotatingLogWriterBuilder",
    "RotationConfig",
    "WriterState",
    "LocalFileSystem",
]
