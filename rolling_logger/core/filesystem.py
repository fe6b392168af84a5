"""
File-system access for the rotating log writer

All file creation, listing and deletion goes through LocalFileSystem so
tests can substitute failures (disk full, permissions) without touching
the real disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from rolling_logger.core.errors import CreateFailure, NameCollision
from rolling_logger.writers.file_writer import LogFileHandle

logger = logging.getLogger(__name__)


class LocalFileSystem:
    """File-system operations backed by the local disk."""

    def __init__(self, encoding: str = "utf-8", buffer_size: int = -1):
        """
        Initialize file system access.

        Args:
            encoding: Encoding used for created log files
            buffer_size: Write buffer size in bytes (-1 for io default)
        """
        self.encoding = encoding
        self.buffer_size = buffer_size

    def create(self, filepath: Union[str, Path]) -> LogFileHandle:
        """
        Create a new log file, never overwriting an existing one.

        Args:
            filepath: Path of the file to create

        Returns:
            Open handle for the new file

        Raises:
            NameCollision: If the file already exists
            CreateFailure: If the file cannot be created for any other reason
        """
        path = Path(filepath)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CreateFailure("Failed to create log directory", str(path.parent), e) from e

        try:
            stream = open(path, "x", encoding=self.encoding, buffering=self.buffer_size)
        except FileExistsError as e:
            raise NameCollision("Log file already exists", str(path), e) from e
        except OSError as e:
            raise CreateFailure("Failed to create log file", str(path), e) from e

        logger.debug("Created log file %s", path)
        return LogFileHandle(path, stream)

    def list_names(self, directory: Union[str, Path]) -> List[str]:
        """
        List regular file names in a directory.

        A missing directory has no files.
        """
        path = Path(directory)
        if not path.is_dir():
            return []
        return [entry.name for entry in path.iterdir() if entry.is_file()]

    def delete(self, filepath: Union[str, Path]) -> None:
        """
        Delete a file.

        Raises:
            OSError: If the file cannot be removed
        """
        Path(filepath).unlink()
        logger.debug("Deleted log file %s", filepath)
