"""Single log file handle"""

from pathlib import Path
from typing import IO, Optional

from rolling_logger.core.errors import WriteFailure


class LogFileHandle:
    """Buffered writer bound to one log file."""

    def __init__(self, filepath: Path, stream: IO[str]):
        """
        Wrap an already opened text stream.

        Use LocalFileSystem.create() to obtain instances; it performs the
        exclusive create that guarantees no existing file is overwritten.

        Args:
            filepath: Path of the open file
            stream: Buffered text stream opened for writing
        """
        self.filepath = Path(filepath)
        self._file: Optional[IO[str]] = stream
        self.lines_written = 0

    @property
    def name(self) -> str:
        """File name without directory."""
        return self.filepath.name

    @property
    def closed(self) -> bool:
        return self._file is None

    def write_line(self, message: str) -> None:
        """
        Write one message terminated by a newline.

        Raises:
            WriteFailure: If the file is closed or the write fails
        """
        if self._file is None:
            raise WriteFailure("Log file is closed", str(self.filepath))
        try:
            self._file.write(message + "\n")
        except (OSError, ValueError) as e:
            raise WriteFailure("Failed to write log message", str(self.filepath), e) from e
        self.lines_written += 1

    def flush(self) -> None:
        """
        Flush file buffer.

        Raises:
            WriteFailure: If buffered data could not be written
        """
        if self._file:
            try:
                self._file.flush()
            except OSError as e:
                raise WriteFailure("Failed to flush log file", str(self.filepath), e) from e

    def close(self) -> None:
        """
        Flush and close the file. Calling close twice is a no-op.

        Raises:
            WriteFailure: If buffered data could not be written; the file
                is closed regardless
        """
        if self._file is None:
            return
        stream, self._file = self._file, None
        try:
            stream.close()
        except OSError as e:
            raise WriteFailure("Failed to close log file", str(self.filepath), e) from e

    def __repr__(self) -> str:
        return f"LogFileHandle({str(self.filepath)!r}, closed={self.closed})"
