"""
Log file retention

Keeps the number of files sharing a base name at or below a maximum by
deleting the oldest ones. The active file is never a deletion candidate.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union, TYPE_CHECKING

from rolling_logger.core.errors import PruneFailure
from rolling_logger.policies.naming import is_log_file

if TYPE_CHECKING:
    from rolling_logger.core.filesystem import LocalFileSystem

logger = logging.getLogger(__name__)


def select_for_deletion(
    base_name: str,
    file_names: Iterable[str],
    max_file_count: Optional[int],
    active: Optional[str] = None
) -> List[str]:
    """
    Choose which files must go to bring the count down to the maximum.

    Only names generated for ``base_name`` are considered. The active
    file counts towards the maximum but is removed from the candidates
    before sorting, so it survives regardless of its age.

    Args:
        base_name: Base name whose files are considered
        file_names: Names present in the log directory
        max_file_count: Maximum number of retained files (None: unbounded)
        active: Name of the currently open file, if any

    Returns:
        Names to delete, oldest first
    """
    if max_file_count is None:
        return []

    owned = sorted({name for name in file_names if is_log_file(base_name, name)})
    excess = len(owned) - max_file_count
    if excess <= 0:
        return []

    candidates = [name for name in owned if name != active]
    return candidates[:excess]


class RetentionManager:
    """
    Prune old log files for a base name.

    Example:
        retention = RetentionManager()
        deleted = retention.prune("logs", "updater", max_file_count=5,
                                  active="updater 2026-10-18_09-00-00.000000")
    """

    def __init__(
        self,
        filesystem: Optional["LocalFileSystem"] = None,
        on_failure: Optional[Callable[[PruneFailure], None]] = None
    ):
        """
        Initialize retention manager.

        Args:
            filesystem: File-system access (default: local disk)
            on_failure: Called once for every file that could not be deleted
        """
        if filesystem is None:
            from rolling_logger.core.filesystem import LocalFileSystem
            filesystem = LocalFileSystem()
        self._filesystem = filesystem
        self._on_failure = on_failure
        self.last_failures: List[PruneFailure] = []

    def prune(
        self,
        directory: Union[str, Path],
        base_name: str,
        max_file_count: Optional[int],
        active: Optional[str] = None
    ) -> List[str]:
        """
        Delete the oldest files of ``base_name`` beyond ``max_file_count``.

        A failed deletion is reported and pruning carries on with the
        remaining candidates.

        Args:
            directory: Directory holding the log files
            base_name: Base name whose files are pruned
            max_file_count: Maximum number of retained files (None: unbounded)
            active: Name of the currently open file, never deleted

        Returns:
            Names of the files actually deleted
        """
        self.last_failures = []
        if max_file_count is None:
            return []

        directory = Path(directory)
        names = self._filesystem.list_names(directory)
        doomed = select_for_deletion(base_name, names, max_file_count, active)

        deleted: List[str] = []
        for name in doomed:
            try:
                self._filesystem.delete(directory / name)
            except OSError as e:
                failure = PruneFailure("Failed to delete log file", str(directory / name), e)
                self._report(failure)
                continue
            deleted.append(name)

        if deleted:
            logger.info(
                "Pruned %d log file(s) for %r, retaining at most %d",
                len(deleted), base_name, max_file_count
            )
        return deleted

    def _report(self, failure: PruneFailure) -> None:
        self.last_failures.append(failure)
        logger.warning("%s", failure)
        if self._on_failure is not None:
            try:
                self._on_failure(failure)
            except Exception:
                logger.exception("Prune failure callback raised")
