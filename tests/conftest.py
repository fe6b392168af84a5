"""Shared fixtures for rotating log writer tests"""

from datetime import datetime, timedelta
from pathlib import Path
from typing import List

import pytest

from rolling_logger.core.errors import CreateFailure
from rolling_logger.core.filesystem import LocalFileSystem
from rolling_logger.policies.naming import is_log_file


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 10, 18, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FlakyFileSystem(LocalFileSystem):
    """Local file system whose file creation can be switched off."""

    def __init__(self, fail_creates: bool = False):
        super().__init__()
        self.fail_creates = fail_creates
        self.create_attempts = 0

    def create(self, filepath):
        self.create_attempts += 1
        if self.fail_creates:
            raise CreateFailure(
                "Failed to create log file",
                str(filepath),
                OSError(28, "No space left on device"),
            )
        return super().create(filepath)


def log_files(directory: Path, base_name: str) -> List[Path]:
    """Files belonging to base_name, oldest first."""
    return sorted(
        (p for p in Path(directory).iterdir() if is_log_file(base_name, p.name)),
        key=lambda p: p.name,
    )


def read_logs(directory: Path, base_name: str) -> List[List[str]]:
    """Lines of every file belonging to base_name, oldest file first."""
    return [
        path.read_text(encoding="utf-8").splitlines()
        for path in log_files(directory, base_name)
    ]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def flaky_fs():
    return FlakyFileSystem()
