"""Writers module - Log file handles"""

from rolling_logger.writers.file_writer import LogFileHandle

__all__ = ["LogFileHandle"]
