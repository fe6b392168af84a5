"""Tests for the rotating log writer"""

import logging
import threading
import time

import pytest
from unittest.mock import MagicMock

from rolling_logger import (
    CreateFailure,
    RotatingLogWriter,
    RotationConfig,
    WriteFailure,
    WriterState,
)
from rolling_logger.policies.naming import generate_name
from rolling_logger.safety import OperatorAlert

from conftest import FakeClock, log_files, read_logs


def make_writer(tmp_path, clock, max_messages=1000, max_duration=3600,
                max_files=None, base_name="app", **kwargs):
    config = RotationConfig(
        max_message_count=max_messages,
        max_duration=max_duration,
        max_file_count=max_files,
        base_name=base_name,
        directory=tmp_path,
        background_prune=kwargs.pop("background_prune", False),
    )
    return RotatingLogWriter(config, clock=clock, **kwargs)


class TestOpenAndClose:
    """Test writer lifecycle."""

    def test_initial_state(self, tmp_path, clock):
        """Test writer state before open."""
        writer = make_writer(tmp_path, clock)
        assert writer.state is WriterState.UNINITIALIZED
        assert writer.active_path is None
        assert list(tmp_path.iterdir()) == []
        writer.close()

    def test_open_creates_named_file(self, tmp_path, clock):
        """Test open creates a file named after the base name."""
        writer = make_writer(tmp_path, clock)
        path = writer.open()

        assert writer.state is WriterState.ACTIVE
        assert path == tmp_path / generate_name("app", clock.now)
        assert path.exists()
        assert writer.message_count == 0
        assert writer.opened_at == clock.now
        writer.close()

    def test_open_with_base_name(self, tmp_path, clock):
        """Test base name override on open."""
        writer = make_writer(tmp_path, clock)
        path = writer.open("updater_package")

        assert path.name.startswith("updater_package ")
        assert writer.base_name == "updater_package"
        writer.close()

    def test_open_twice_rejected(self, tmp_path, clock):
        """Test opening an open writer fails."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        with pytest.raises(RuntimeError):
            writer.open()
        writer.close()

    def test_open_creates_directory(self, tmp_path, clock):
        """Test missing log directory is created."""
        writer = make_writer(tmp_path / "nested" / "logs", clock)
        assert writer.open().exists()
        writer.close()

    def test_close_flushes(self, tmp_path, clock):
        """Test close writes buffered messages."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer.append("hello")
        writer.close()

        assert read_logs(tmp_path, "app") == [["hello"]]
        assert writer.state is WriterState.CLOSED

    def test_close_is_idempotent(self, tmp_path, clock):
        """Test closing twice."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer.append("once")
        writer.close()
        writer.close()

        assert read_logs(tmp_path, "app") == [["once"]]

    def test_close_unopened_writer(self, tmp_path, clock):
        """Test closing a writer that was never opened."""
        writer = make_writer(tmp_path, clock)
        writer.close()
        assert writer.state is WriterState.CLOSED
        with pytest.raises(RuntimeError):
            writer.open()

    def test_context_manager(self, tmp_path, clock):
        """Test context manager opens and closes."""
        with make_writer(tmp_path, clock) as writer:
            writer.append("inside")
            assert writer.state is WriterState.ACTIVE
        assert writer.state is WriterState.CLOSED
        assert read_logs(tmp_path, "app") == [["inside"]]


class TestAppend:
    """Test writing and count-based rotation."""

    def test_lines_in_order(self, tmp_path, clock):
        """Test messages are written in order."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        for i in range(5):
            writer.append(f"line {i}")
        writer.close()

        assert read_logs(tmp_path, "app") == [[f"line {i}" for i in range(5)]]

    def test_non_string_message(self, tmp_path, clock):
        """Test non-string messages are converted."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer.append(42)
        writer.close()
        assert read_logs(tmp_path, "app") == [["42"]]

    def test_log_message_formats(self, tmp_path, clock):
        """Test printf-style formatting."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer.log_message("localVersion: %d", 7)
        writer.log_message("plain 100%")
        writer.close()
        assert read_logs(tmp_path, "app") == [["localVersion: 7", "plain 100%"]]

    def test_exact_count_does_not_rotate(self, tmp_path, clock):
        """Test reaching the message limit does not rotate."""
        writer = make_writer(tmp_path, clock, max_messages=3)
        writer.open()
        for i in range(3):
            writer.append(str(i))

        assert writer.stats.rollovers == 0
        assert writer.message_count == 3
        writer.close()

    def test_rotates_after_k_plus_one_messages(self, tmp_path, clock):
        """Test rotation after exceeding the message limit."""
        writer = make_writer(tmp_path, clock, max_messages=2)
        writer.open()
        for i in range(1, 8):
            writer.append(f"m{i}")
        writer.close()

        assert read_logs(tmp_path, "app") == [
            ["m1", "m2", "m3"],
            ["m4", "m5", "m6"],
            ["m7"],
        ]

    @pytest.mark.parametrize("k,n", [(1, 5), (2, 7), (3, 12), (5, 1), (4, 23)])
    def test_file_count_matches_ceiling(self, tmp_path, clock, k, n):
        """Test number of files produced for N messages."""
        writer = make_writer(tmp_path, clock, max_messages=k)
        writer.open()
        for i in range(n):
            writer.append(f"m{i}")
        writer.close()

        non_empty = [lines for lines in read_logs(tmp_path, "app") if lines]
        assert len(non_empty) == -(-n // (k + 1))

    def test_no_loss_or_duplication_across_rollovers(self, tmp_path, clock):
        """Test every message lands in exactly one file."""
        writer = make_writer(tmp_path, clock, max_messages=4)
        writer.open()
        messages = [f"message {i}" for i in range(57)]
        for message in messages:
            writer.append(message)
            clock.advance(0.001)
        writer.close()

        written = [line for lines in read_logs(tmp_path, "app") for line in lines]
        assert written == messages

    def test_counter_resets_on_rollover(self, tmp_path, clock):
        """Test message counter reset."""
        writer = make_writer(tmp_path, clock, max_messages=2)
        writer.open()
        for i in range(3):
            writer.append(str(i))

        assert writer.stats.rollovers == 1
        assert writer.message_count == 0
        writer.close()

    def test_forced_rollover(self, tmp_path, clock):
        """Test explicit rollover."""
        writer = make_writer(tmp_path, clock)
        first = writer.open()
        writer.append("before")
        second = writer.rollover()
        writer.append("after")
        writer.close()

        assert first != second
        assert read_logs(tmp_path, "app") == [["before"], ["after"]]


class TestDurationRotation:
    """Test duration-based rotation."""

    def test_duration_trips_rollover(self, tmp_path, clock):
        """Test rotation after the duration limit."""
        writer = make_writer(tmp_path, clock, max_duration=1)
        writer.open()
        writer.append("first")
        clock.advance(2)
        writer.append("second")

        assert writer.stats.rollovers == 1
        assert writer.opened_at == clock.now
        writer.close()

        files = read_logs(tmp_path, "app")
        assert len(files) == 2
        assert [line for lines in files for line in lines] == ["first", "second"]

    def test_exact_duration_does_not_rotate(self, tmp_path, clock):
        """Test reaching the duration limit does not rotate."""
        writer = make_writer(tmp_path, clock, max_duration=1)
        writer.open()
        clock.advance(1)
        writer.append("on the boundary")

        assert writer.stats.rollovers == 0
        writer.close()

    def test_duration_measured_from_file_open(self, tmp_path, clock):
        """Test elapsed time starts at file open."""
        writer = make_writer(tmp_path, clock, max_duration=10)
        writer.open()
        for _ in range(4):
            clock.advance(3)
            writer.append("tick")

        # 12 seconds since open even though writes were 3 seconds apart
        assert writer.stats.rollovers == 1
        writer.close()

    def test_real_clock(self, tmp_path):
        """Test duration rotation with the system clock."""
        writer = make_writer(tmp_path, None, max_duration=0.05)
        writer.open()
        writer.append("first")
        time.sleep(0.1)
        writer.append("second")

        assert writer.stats.rollovers == 1
        writer.close()
        assert len(log_files(tmp_path, "app")) == 2


class TestNaming:
    """Test name collisions and ordering."""

    def test_frozen_clock_names_stay_sorted(self, tmp_path, clock):
        """Test names stay ordered when the clock does not move."""
        writer = make_writer(tmp_path, clock, max_messages=1)
        writer.open()
        created = [writer.active_path.name]
        for i in range(6):
            writer.append(str(i))
            if writer.active_path.name != created[-1]:
                created.append(writer.active_path.name)
        writer.close()

        assert len(created) == 4
        assert sorted(created) == created
        assert created[1].endswith("-001")

    def test_existing_file_is_not_overwritten(self, tmp_path, clock):
        """Test name collision with an existing file."""
        taken = tmp_path / generate_name("app", clock.now)
        taken.write_text("someone else's data\n")

        writer = make_writer(tmp_path, clock)
        path = writer.open()
        writer.append("mine")
        writer.close()

        assert path != taken
        assert path.name.endswith("-001")
        assert taken.read_text() == "someone else's data\n"
        assert writer.stats.name_collisions == 1

    def test_clock_moving_backwards(self, tmp_path, clock):
        """Test names stay ordered when the clock goes back."""
        writer = make_writer(tmp_path, clock)
        first = writer.open()
        clock.advance(-3600)
        second = writer.rollover()
        writer.close()

        assert second.name > first.name

    def test_exhausted_names_fail_creation(self, tmp_path, clock):
        """Test creation fails when no name is free."""
        for seq in range(2):
            (tmp_path / generate_name("app", clock.now, seq)).write_text("")
        alerts = []
        writer = make_writer(tmp_path, clock, alert_handlers=[alerts.append])
        writer.MAX_NAME_ATTEMPTS = 2

        with pytest.raises(CreateFailure):
            writer.open()
        assert writer.state is WriterState.DEGRADED
        assert len(alerts) == 1
        writer.close()


class TestRetention:
    """Test pruning after rollover."""

    def test_scenario_keeps_two_most_recent(self, tmp_path, clock):
        """Test retention keeps the newest files."""
        writer = make_writer(tmp_path, clock, max_messages=2, max_files=2)
        writer.open()
        for i in range(1, 9):
            writer.append(f"m{i}")
            clock.advance(0.01)
        writer.close()

        assert read_logs(tmp_path, "app") == [["m4", "m5", "m6"], ["m7", "m8"]]
        assert writer.stats.files_pruned == 1

    def test_zero_keeps_only_active_file(self, tmp_path, clock):
        """Test file limit of zero."""
        writer = make_writer(tmp_path, clock, max_messages=1, max_files=0)
        writer.open()
        for i in range(6):
            writer.append(str(i))

        files = log_files(tmp_path, "app")
        assert files == [writer.active_path]
        writer.close()

    def test_unbounded_retention(self, tmp_path, clock):
        """Test no pruning without a file limit."""
        writer = make_writer(tmp_path, clock, max_messages=1, max_files=None)
        writer.open()
        for i in range(10):
            writer.append(str(i))
        writer.close()

        assert len(log_files(tmp_path, "app")) == 6

    def test_count_never_exceeds_limit(self, tmp_path, clock):
        """Test file count stays within the limit."""
        writer = make_writer(tmp_path, clock, max_messages=1, max_files=3)
        writer.open()
        for i in range(20):
            writer.append(str(i))
            files = log_files(tmp_path, "app")
            assert len(files) <= 3
            assert writer.active_path in files
        writer.close()

    def test_other_writers_untouched(self, tmp_path, clock):
        """Test files of other base names survive pruning."""
        other = make_writer(tmp_path, clock, max_messages=1, base_name="other")
        other.open()
        for i in range(4):
            other.append(str(i))
        other.close()

        writer = make_writer(tmp_path, clock, max_messages=1, max_files=1)
        writer.open()
        for i in range(4):
            writer.append(str(i))
        writer.close()

        assert len(log_files(tmp_path, "other")) == 3
        assert len(log_files(tmp_path, "app")) == 1

    def test_background_prune(self, tmp_path, clock):
        """Test pruning on a background thread."""
        writer = make_writer(tmp_path, clock, max_messages=1, max_files=2,
                             background_prune=True)
        writer.open()
        for i in range(10):
            writer.append(str(i))
        writer.wait_for_pruning(timeout=5)

        files = log_files(tmp_path, "app")
        assert len(files) == 2
        assert writer.active_path in files
        writer.close()

    def _leftovers(self, directory, clock, year, count):
        names = [
            generate_name("app", clock.now.replace(year=year, second=i))
            for i in range(count)
        ]
        for name in names:
            (directory / name).write_text("old\n")
        return names

    def test_open_applies_retention(self, tmp_path, clock):
        """Test open prunes leftover files."""
        leftovers = self._leftovers(tmp_path, clock, 2020, 5)
        writer = make_writer(tmp_path, clock, max_files=2)
        active = writer.open()

        assert log_files(tmp_path, "app") == [tmp_path / leftovers[-1], active]
        writer.close()

    def test_manual_prune(self, tmp_path, clock):
        """Test explicit prune."""
        writer = make_writer(tmp_path, clock, max_files=2)
        active = writer.open()
        self._leftovers(tmp_path, clock, 2021, 3)
        self._leftovers(tmp_path, clock, 2019, 1)

        deleted = writer.prune()

        assert len(deleted) == 3
        assert writer.stats.files_pruned == 3
        remaining = log_files(tmp_path, "app")
        assert len(remaining) == 2
        assert remaining[-1] == active
        writer.close()


class TestDegradedState:
    """Test creation failures and recovery."""

    def test_rollover_failure_degrades(self, tmp_path, clock, flaky_fs):
        """Test failed rollover enters degraded state."""
        alerts = []
        writer = make_writer(tmp_path, clock, max_messages=1,
                             filesystem=flaky_fs, alert_handlers=[alerts.append])
        first = writer.open()
        writer.append("m1")

        flaky_fs.fail_creates = True
        writer.append("m2")  # triggers rollover, must not raise

        assert writer.state is WriterState.DEGRADED
        assert writer.active_path is None
        assert writer.message_count == 2
        assert len(alerts) == 1

        alert = alerts[0]
        assert isinstance(alert, OperatorAlert)
        assert isinstance(alert.error, CreateFailure)
        assert alert.base_name == "app"
        assert alert.recent_files == [first]
        assert alert.status["status"] == "unhealthy"
        assert "no_active_file" in alert.status["issues"]

        assert read_logs(tmp_path, "app") == [["m1", "m2"]]
        writer.close()

    def test_append_while_degraded_warns_each_time(self, tmp_path, clock, flaky_fs, caplog):
        """Test dropped messages are logged."""
        writer = make_writer(tmp_path, clock, max_messages=1,
                             filesystem=flaky_fs, alert_handlers=[lambda alert: None])
        writer.open()
        flaky_fs.fail_creates = True
        writer.append("m1")
        writer.append("m2")

        caplog.clear()
        with caplog.at_level(logging.WARNING, logger="rolling_logger"):
            writer.append("lost 1")
            writer.append("lost 2")

        warnings = [r for r in caplog.records if "Dropping message" in r.getMessage()]
        assert len(warnings) == 2
        assert writer.stats.messages_dropped == 2
        assert writer.stats.alerts_raised == 1
        writer.close()

    def test_checked_append_reports_failures(self, tmp_path, clock, flaky_fs):
        """Test checked append raises on failure."""
        writer = make_writer(tmp_path, clock, max_messages=1,
                             filesystem=flaky_fs, alert_handlers=[lambda alert: None])
        writer.open()
        writer.append_checked("m1")

        flaky_fs.fail_creates = True
        with pytest.raises(CreateFailure):
            writer.append_checked("m2")
        with pytest.raises(WriteFailure):
            writer.append_checked("m3")
        writer.close()

    def test_recover(self, tmp_path, clock, flaky_fs):
        """Test recovery from degraded state."""
        writer = make_writer(tmp_path, clock, max_messages=1,
                             filesystem=flaky_fs, alert_handlers=[lambda alert: None])
        writer.open()
        writer.append("m1")
        flaky_fs.fail_creates = True
        writer.append("m2")
        writer.append("dropped")

        with pytest.raises(CreateFailure):
            writer.recover()
        assert writer.state is WriterState.DEGRADED

        flaky_fs.fail_creates = False
        clock.advance(1)
        path = writer.recover()

        assert writer.state is WriterState.ACTIVE
        assert writer.active_path == path
        assert writer.message_count == 0
        writer.append("m3")
        writer.close()

        assert read_logs(tmp_path, "app") == [["m1", "m2"], ["m3"]]

    def test_recover_requires_degraded(self, tmp_path, clock):
        """Test recover outside degraded state."""
        writer = make_writer(tmp_path, clock)
        with pytest.raises(RuntimeError):
            writer.recover()
        path = writer.open()
        assert writer.recover() == path
        writer.close()

    def test_open_failure(self, tmp_path, clock, flaky_fs):
        """Test failed open."""
        alerts = []
        flaky_fs.fail_creates = True
        writer = make_writer(tmp_path, clock, filesystem=flaky_fs,
                             alert_handlers=[alerts.append])

        with pytest.raises(CreateFailure):
            writer.open()

        assert writer.state is WriterState.DEGRADED
        assert len(alerts) == 1
        assert alerts[0].recent_files == []
        writer.append("nowhere")
        assert writer.stats.messages_dropped == 1
        writer.close()

    def test_failing_alert_handler_does_not_escape(self, tmp_path, clock, flaky_fs):
        """Test alert handler errors stay inside the writer."""
        calls = []

        def broken(alert):
            raise RuntimeError("mail server down")

        writer = make_writer(tmp_path, clock, max_messages=1, filesystem=flaky_fs,
                             alert_handlers=[broken, calls.append])
        writer.open()
        flaky_fs.fail_creates = True
        writer.append("m1")
        writer.append("m2")

        assert len(calls) == 1
        writer.close()

    def test_append_after_close(self, tmp_path, clock):
        """Test appending to a closed writer."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer.close()

        writer.append("late")
        with pytest.raises(WriteFailure):
            writer.append_checked("late")
        assert writer.stats.messages_dropped == 2


class TestWriteFailures:
    """Test failures of the underlying file."""

    def test_write_failure_is_recorded(self, tmp_path, clock):
        """Test write failure statistics."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        writer._file._file.close()  # simulate a broken stream

        writer.append("lost")
        assert writer.stats.write_failures == 1
        assert writer.message_count == 0

        with pytest.raises(WriteFailure):
            writer.append_checked("lost again")
        writer.close()

    def test_flush_failure_is_reported(self, tmp_path, clock):
        """Test flush errors reach the caller."""
        writer = make_writer(tmp_path, clock)
        writer.open()
        stream = writer._file._file
        broken = MagicMock()
        broken.flush.side_effect = OSError(28, "No space left on device")
        writer._file._file = broken

        with pytest.raises(WriteFailure) as excinfo:
            writer.flush()

        assert isinstance(excinfo.value.cause, OSError)
        assert writer.stats.write_failures == 1
        writer.close()
        stream.close()

    def test_rollover_logs_line_count(self, tmp_path, clock, caplog):
        """Test rollover debug log reports lines in the retired file."""
        caplog.set_level(logging.DEBUG, logger="rolling_logger.core.log_writer")
        writer = make_writer(tmp_path, clock, max_messages=2)
        writer.open()
        for i in range(3):
            writer.append(f"m{i}")
        writer.close()

        rollovers = [r.getMessage() for r in caplog.records if "Rolled over" in r.getMessage()]
        assert len(rollovers) == 1
        assert "(3 lines)" in rollovers[0]


class TestConcurrency:
    """Test shared use from several threads."""

    def test_concurrent_appends(self, tmp_path):
        """Test appends from several threads."""
        clock = FakeClock()
        writer = make_writer(tmp_path, clock, max_messages=100)
        writer.open()

        def worker(thread_no):
            for i in range(250):
                writer.append(f"{thread_no}:{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        writer.close()

        lines = [line for lines in read_logs(tmp_path, "app") for line in lines]
        assert len(lines) == 1000
        for n in range(4):
            mine = [line for line in lines if line.startswith(f"{n}:")]
            assert mine == [f"{n}:{i}" for i in range(250)]
