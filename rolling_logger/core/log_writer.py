"""
Rotating log writer

Appends text lines to a log file, rolls over to a new file when the
message count or file age threshold is exceeded, and prunes old files
so at most a configured number remain on disk.
"""

from __future__ import annotations
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional
import atexit
import logging
import threading
import time

from rolling_logger.core.errors import CreateFailure, NameCollision, PruneFailure, WriteFailure
from rolling_logger.core.filesystem import LocalFileSystem
from rolling_logger.core.rotation_config import RotationConfig
from rolling_logger.core.writer_state import WriterState
from rolling_logger.monitoring.health_checker import HealthChecker
from rolling_logger.monitoring.metrics import WriterStats
from rolling_logger.monitoring.monitor import NullMonitor
from rolling_logger.policies.naming import MAX_SEQUENCE, generate_name, is_log_file
from rolling_logger.policies.retention import RetentionManager
from rolling_logger.policies.rotation import RotationPolicy
from rolling_logger.safety.alerts import (
    RECENT_FILE_COUNT,
    AlertDispatcher,
    AlertHandler,
    OperatorAlert,
)
from rolling_logger.writers.file_writer import LogFileHandle

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class RotatingLogWriter:
    """
    Log writer with count/duration rotation and file count retention.

    Thread Safety:
        All mutating operations are serialized by an internal lock, so a
        writer may be shared between threads.

    Example:
        config = RotationConfig(max_message_count=1000, max_duration=3600,
                                max_file_count=5, base_name="updater",
                                directory="logs")
        with RotatingLogWriter(config) as writer:
            writer.append("waiting for updates")
    """

    # Disambiguated names tried before giving up on a rollover
    MAX_NAME_ATTEMPTS = 100

    def __init__(
        self,
        config: RotationConfig,
        clock: Optional[Clock] = None,
        filesystem: Optional[LocalFileSystem] = None,
        alert_handlers: Optional[List[AlertHandler]] = None,
        monitor=None
    ):
        """
        Initialize rotating log writer. No file is created until open().

        Args:
            config: Thresholds, base name and directory
            clock: Time source for file names and elapsed time
                (default: datetime.now)
            filesystem: File-system access (default: local disk)
            alert_handlers: Called when the writer is left without a file
                (default: log at CRITICAL)
            monitor: Metrics backend (default: NullMonitor)
        """
        self._config = config
        self._clock: Clock = clock or datetime.now
        self._filesystem = filesystem or LocalFileSystem(
            encoding=config.encoding,
            buffer_size=config.buffer_size,
        )
        self._policy = RotationPolicy(config.max_message_count, config.max_duration)
        self._retention = RetentionManager(self._filesystem, on_failure=self._on_prune_failure)
        self._alerts = AlertDispatcher(alert_handlers)
        self._monitor = monitor or NullMonitor()

        self._lock = threading.RLock()
        self._state = WriterState.UNINITIALIZED
        self._base_name = config.base_name
        self._file: Optional[LogFileHandle] = None
        self._message_count = 0
        self._opened_at: Optional[datetime] = None
        self._last_write_at: Optional[datetime] = None
        self._last_stamp: Optional[datetime] = None
        self._last_sequence = 0
        self._stats = WriterStats()
        self._prune_threads: List[threading.Thread] = []

        atexit.register(self.close)

    # ------------------------------------------------------------------
    # Properties

    @property
    def config(self) -> RotationConfig:
        return self._config

    @property
    def base_name(self) -> str:
        return self._base_name

    @property
    def directory(self) -> Path:
        return Path(self._config.directory)

    @property
    def state(self) -> WriterState:
        return self._state

    @property
    def active_path(self) -> Optional[Path]:
        """Path of the file currently receiving writes."""
        with self._lock:
            return self._file.filepath if self._file else None

    @property
    def message_count(self) -> int:
        """Messages written to the active file."""
        return self._message_count

    @property
    def opened_at(self) -> Optional[datetime]:
        return self._opened_at

    @property
    def last_write_at(self) -> Optional[datetime]:
        return self._last_write_at

    @property
    def stats(self) -> WriterStats:
        """Snapshot of the writer statistics."""
        with self._lock:
            return self._stats.snapshot()

    def elapsed_seconds(self, now: Optional[datetime] = None) -> float:
        """Seconds since the active file was opened."""
        if self._opened_at is None:
            return 0.0
        moment = now if now is not None else self._clock()
        return (moment - self._opened_at).total_seconds()

    # ------------------------------------------------------------------
    # Lifecycle

    def open(self, base_name: Optional[str] = None) -> Path:
        """
        Create the first log file and start accepting messages.

        Args:
            base_name: Override the configured base name

        Returns:
            Path of the created file

        Raises:
            CreateFailure: If the file cannot be created; the writer is
                left degraded and an operator alert is raised
            RuntimeError: If the writer is already open or closed
        """
        with self._lock:
            if self._state is not WriterState.UNINITIALIZED:
                raise RuntimeError(f"Cannot open writer in state {self._state}")

            if base_name is not None:
                self._config = replace(self._config, base_name=base_name)
                self._base_name = base_name

            self._stats.started_at = self._clock()
            try:
                self._start_new_file()
            except CreateFailure as e:
                self._enter_degraded("Failed to open log file", e)
                raise

            logger.info("Opened log %s", self._file.filepath)
            self._schedule_prune()
            return self._file.filepath

    def recover(self) -> Path:
        """
        Leave the degraded state by creating a fresh log file.

        Returns:
            Path of the active file

        Raises:
            CreateFailure: If the file still cannot be created
            RuntimeError: If the writer was never opened or is closed
        """
        with self._lock:
            if self._state is WriterState.ACTIVE:
                return self._file.filepath
            if self._state is not WriterState.DEGRADED:
                raise RuntimeError(f"Cannot recover writer in state {self._state}")

            try:
                self._start_new_file()
            except CreateFailure as e:
                self._stats.create_failures += 1
                self._monitor.record_counter("errors", 1, {"kind": "create"})
                logger.error("Recovery of log %r failed: %s", self._base_name, e)
                raise

            self._monitor.record_gauge("degraded", 0)
            logger.info("Recovered log %r with %s", self._base_name, self._file.filepath)
            self._schedule_prune()
            return self._file.filepath

    def close(self) -> None:
        """
        Flush and close the active file. Calling close twice is a no-op.

        Raises:
            WriteFailure: If buffered messages could not be written; the
                writer is closed regardless
        """
        with self._lock:
            if self._state is WriterState.CLOSED:
                return

            handle, self._file = self._file, None
            self._set_state(WriterState.CLOSED)
            atexit.unregister(self.close)

            if handle is not None:
                try:
                    handle.close()
                except WriteFailure as e:
                    self._record_write_failure(e)
                    raise
                logger.debug("Closed log %s", handle.filepath)

    def __enter__(self) -> "RotatingLogWriter":
        """Context manager entry; opens the writer if needed."""
        if self._state is WriterState.UNINITIALIZED:
            self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    # ------------------------------------------------------------------
    # Writing

    def append(self, message: str) -> None:
        """
        Write a message without reporting failures to the caller.

        Failures are recorded in the statistics and logged; a rollover
        that leaves no active file raises an operator alert.
        """
        with self._lock:
            self._append(message, checked=False)

    def append_checked(self, message: str) -> None:
        """
        Write a message and report failures to the caller.

        Raises:
            WriteFailure: If the message was not written
            CreateFailure: If the message was written but the rollover it
                triggered could not create a new file
        """
        with self._lock:
            self._append(message, checked=True)

    def log_message(self, fmt: str, *args) -> None:
        """Format with %-style arguments and append."""
        self.append(fmt % args if args else fmt)

    def flush(self) -> None:
        """
        Flush buffered messages of the active file.

        Raises:
            WriteFailure: If buffered data could not be written
        """
        with self._lock:
            if self._file is None:
                return
            try:
                self._file.flush()
            except WriteFailure as e:
                self._record_write_failure(e)
                raise

    def rollover(self) -> Path:
        """
        Force a rollover to a new file.

        Returns:
            Path of the new active file

        Raises:
            CreateFailure: If the new file cannot be created
            RuntimeError: If the writer is not active
        """
        with self._lock:
            if self._state is not WriterState.ACTIVE:
                raise RuntimeError(f"Cannot roll over writer in state {self._state}")
            self._rollover()
            return self._file.filepath

    def prune(self) -> List[str]:
        """
        Apply retention now.

        Returns:
            Names of the deleted files
        """
        with self._lock:
            return self._prune()

    def wait_for_pruning(self, timeout: Optional[float] = None) -> None:
        """Wait for background pruning started by earlier rollovers."""
        with self._lock:
            threads = list(self._prune_threads)
        for thread in threads:
            thread.join(timeout)
        with self._lock:
            self._prune_threads = [t for t in self._prune_threads if t.is_alive()]

    def _append(self, message: str, checked: bool) -> None:
        if not isinstance(message, str):
            message = str(message)

        if not self._state.accepts_writes:
            self._drop()
            if checked:
                raise WriteFailure(
                    f"No active log file (writer {self._state})", self._base_name
                )
            return

        now = self._clock()
        try:
            self._file.write_line(message)
        except WriteFailure as e:
            self._record_write_failure(e)
            if checked:
                raise
            return

        self._message_count += 1
        self._last_write_at = now
        self._stats.record_write(now)
        self._monitor.record_counter("messages", 1)
        self._monitor.record_gauge("active_message_count", self._message_count)

        if self._policy.check(self._message_count, self.elapsed_seconds(now)):
            try:
                self._rollover()
            except CreateFailure:
                # Already escalated through the operator alert
                if checked:
                    raise

    def _set_state(self, target: WriterState) -> None:
        if not self._state.can_transition_to(target):
            raise RuntimeError(f"Illegal writer transition {self._state} -> {target}")
        if target is not self._state:
            logger.debug("Log %r: %s -> %s", self._base_name, self._state, target)
        self._state = target

    def _drop(self) -> None:
        self._stats.record_drop()
        self._monitor.record_counter("dropped", 1)
        logger.warning(
            "Dropping message for log %r: writer is %s", self._base_name, self._state
        )

    def _record_write_failure(self, error: WriteFailure) -> None:
        self._stats.write_failures += 1
        self._monitor.record_counter("errors", 1, {"kind": "write"})
        logger.error("%s", error)

    # ------------------------------------------------------------------
    # Rollover

    def _rollover(self) -> None:
        """Close the active file and open its replacement."""
        started = time.perf_counter()
        previous, self._file = self._file, None
        if previous is not None:
            try:
                previous.close()
            except WriteFailure as e:
                self._record_write_failure(e)

        try:
            self._start_new_file()
        except CreateFailure as e:
            self._enter_degraded("Log rollover failed to create a new file", e)
            raise

        self._stats.record_rollover(self._opened_at)
        self._monitor.record_counter("rollovers", 1)
        self._monitor.record_histogram(
            "rollover_latency", (time.perf_counter() - started) * 1000.0
        )
        logger.debug(
            "Rolled over log %r from %s (%d lines) to %s",
            self._base_name,
            previous.name if previous else None,
            previous.lines_written if previous else 0,
            self._file.name,
        )
        self._schedule_prune()

    def _start_new_file(self) -> None:
        """
        Create a file and make it active.

        Counters are reset only after the file exists, so a failure
        leaves them describing the previous file.
        """
        now = self._clock()
        handle = self._create_unique(now)

        self._file = handle
        self._message_count = 0
        self._opened_at = now
        self._set_state(WriterState.ACTIVE)
        self._stats.files_created += 1
        self._monitor.record_gauge("active_message_count", 0)

    def _create_unique(self, now: datetime) -> LogFileHandle:
        """Create a new file whose name sorts after every earlier one."""
        stamp = now
        first = 0
        if self._last_stamp is not None and stamp <= self._last_stamp:
            # Same or earlier clock reading: stay on the previous timestamp
            stamp = self._last_stamp
            first = self._last_sequence + 1

        last_error: Optional[NameCollision] = None
        last_sequence = min(first + self.MAX_NAME_ATTEMPTS, MAX_SEQUENCE + 1)
        for sequence in range(first, last_sequence):
            path = self.directory / generate_name(self._base_name, stamp, sequence)
            try:
                handle = self._filesystem.create(path)
            except NameCollision as e:
                self._stats.name_collisions += 1
                logger.debug("Log file name taken, trying next: %s", path)
                last_error = e
                continue
            self._last_stamp = stamp
            self._last_sequence = sequence
            return handle

        raise CreateFailure(
            "No free log file name", self._base_name, last_error
        ) from last_error

    def _enter_degraded(self, reason: str, error: CreateFailure) -> None:
        """Record a creation failure and alert the operator."""
        self._file = None
        self._set_state(WriterState.DEGRADED)
        self._stats.create_failures += 1
        self._monitor.record_counter("errors", 1, {"kind": "create"})
        self._monitor.record_gauge("degraded", 1)
        logger.error("%s for log %r: %s", reason, self._base_name, error)

        alert = OperatorAlert(
            reason=reason,
            base_name=self._base_name,
            error=error,
            recent_files=self._recent_files(),
            status=HealthChecker(self).check().to_dict(),
        )
        self._stats.alerts_raised += 1
        self._monitor.record_counter("alerts", 1)
        self._alerts.dispatch(alert)

    def _recent_files(self) -> List[Path]:
        try:
            names = self._filesystem.list_names(self.directory)
        except OSError as e:
            logger.warning("Cannot list log directory %s: %s", self.directory, e)
            return []
        owned = sorted(name for name in names if is_log_file(self._base_name, name))
        return [self.directory / name for name in owned[-RECENT_FILE_COUNT:]]

    # ------------------------------------------------------------------
    # Retention

    def _schedule_prune(self) -> None:
        if self._config.max_file_count is None:
            return
        if not self._config.background_prune:
            self._prune()
            return

        thread = threading.Thread(
            target=self._prune_in_background,
            name=f"{self._base_name}-prune",
            daemon=True
        )
        self._prune_threads = [t for t in self._prune_threads if t.is_alive()]
        self._prune_threads.append(thread)
        thread.start()

    def _prune_in_background(self) -> None:
        # Holding the writer lock keeps rollovers out while files are removed
        with self._lock:
            if self._state is not WriterState.ACTIVE:
                return
            self._prune()

    def _prune(self) -> List[str]:
        active = self._file.name if self._file else None
        try:
            deleted = self._retention.prune(
                self.directory,
                self._base_name,
                self._config.max_file_count,
                active=active,
            )
        except OSError as e:
            logger.error("Cannot list log directory %s for pruning: %s", self.directory, e)
            return []

        if deleted:
            self._stats.files_pruned += len(deleted)
            self._monitor.record_counter("files_pruned", len(deleted))
        return deleted

    def _on_prune_failure(self, failure: PruneFailure) -> None:
        self._stats.prune_failures += 1
        self._monitor.record_counter("errors", 1, {"kind": "prune"})
