"""Rotating log writer builder pattern"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from rolling_logger.core.filesystem import LocalFileSystem
from rolling_logger.core.log_writer import Clock, RotatingLogWriter
from rolling_logger.core.rotation_config import RotationConfig
from rolling_logger.safety.alerts import AlertHandler, log_alert


class RotatingLogWriterBuilder:
    """Builder pattern for rotating log writer construction."""

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._clock: Optional[Clock] = None
        self._filesystem: Optional[LocalFileSystem] = None
        self._alert_handlers: List[AlertHandler] = []
        self._monitor = None

    def with_base_name(self, base_name: str) -> "RotatingLogWriterBuilder":
        """Set the prefix shared by all files of this log."""
        self._values["base_name"] = base_name
        return self

    def with_directory(self, directory: Union[str, Path]) -> "RotatingLogWriterBuilder":
        """Set the directory holding the log files."""
        self._values["directory"] = directory
        return self

    def with_max_message_count(self, count: int) -> "RotatingLogWriterBuilder":
        """Roll over once a file holds more than ``count`` messages."""
        self._values["max_message_count"] = count
        return self

    def with_max_duration(self, seconds: float) -> "RotatingLogWriterBuilder":
        """Roll over once a file has been open longer than ``seconds``."""
        self._values["max_duration"] = seconds
        return self

    def with_max_file_count(self, count: Optional[int]) -> "RotatingLogWriterBuilder":
        """Keep at most ``count`` files on disk (None: unbounded)."""
        self._values["max_file_count"] = count
        return self

    def with_config(self, config: RotationConfig) -> "RotatingLogWriterBuilder":
        """
        Start from an existing configuration.

        Later with_* calls override its values.
        """
        self._values = {**config.__dict__, **self._values}
        return self

    def with_encoding(self, encoding: str) -> "RotatingLogWriterBuilder":
        """Set file encoding."""
        self._values["encoding"] = encoding
        return self

    def with_background_prune(self, enabled: bool = True) -> "RotatingLogWriterBuilder":
        """Run retention on a background thread after each rollover."""
        self._values["background_prune"] = enabled
        return self

    def with_clock(self, clock: Clock) -> "RotatingLogWriterBuilder":
        """Set the time source used for names and elapsed time."""
        self._clock = clock
        return self

    def with_filesystem(self, filesystem: LocalFileSystem) -> "RotatingLogWriterBuilder":
        """Set the file-system access object."""
        self._filesystem = filesystem
        return self

    def with_alert_handler(self, handler: AlertHandler) -> "RotatingLogWriterBuilder":
        """
        Add an operator alert handler.

        The default logging handler stays registered alongside it.

        Example:
            def page_operator(alert):
                send_status_mail(alert.summary(), alert.recent_files)

            writer = (RotatingLogWriterBuilder()
                .with_base_name("updater")
                .with_max_message_count(1000)
                .with_max_duration(3600)
                .with_max_file_count(5)
                .with_alert_handler(page_operator)
                .build())
        """
        if not callable(handler):
            raise TypeError("handler must be callable")
        self._alert_handlers.append(handler)
        return self

    def with_monitoring(self, monitor) -> "RotatingLogWriterBuilder":
        """
        Attach a metrics backend.

        Args:
            monitor: NullMonitor, InMemoryMonitor, PrometheusMonitor or any
                object with record_counter/record_gauge/record_histogram
        """
        self._monitor = monitor
        return self

    def build_config(self) -> RotationConfig:
        """
        Build the configuration only.

        Raises:
            ValueError: If a threshold is missing or invalid
        """
        return RotationConfig.from_dict(self._values)

    def build(self, open_writer: bool = True) -> RotatingLogWriter:
        """
        Build and return configured writer.

        Args:
            open_writer: Create the first log file before returning

        Raises:
            ValueError: If a threshold is missing or invalid
            CreateFailure: If open_writer is True and the first file cannot be created
        """
        handlers = [log_alert] + self._alert_handlers
        writer = RotatingLogWriter(
            self.build_config(),
            clock=self._clock,
            filesystem=self._filesystem,
            alert_handlers=handlers,
            monitor=self._monitor,
        )
        if open_writer:
            writer.open()
        return writer
