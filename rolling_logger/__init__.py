"""
BSD 3-Clause License

Copyright (c) 2021, 🍀☀🌕🌥 🌊
All rights reserved.

Rolling Logger - A self-managing rotating log writer for long-running
processes on constrained disks
"""

__version__ = "1.0.0"
__author__ = "kcenon"
__email__ = "kcenon@naver.com"

from rolling_logger.core.log_writer import RotatingLogWriter
from rolling_logger.core.writer_builder import RotatingLogWriterBuilder
from rolling_logger.core.rotation_config import RotationConfig
from rolling_logger.core.writer_state import WriterState
from rolling_logger.core.errors import (
    RotatingLogError,
    CreateFailure,
    WriteFailure,
    PruneFailure,
    NameCollision,
)

# Import submodules (not all classes by default)
from rolling_logger import monitoring
from rolling_logger import policies
from rolling_logger import safety

__all__ = [
    "RotatingLogWriter",
    "RotatingLogWriterBuilder",
    "RotationConfig",
    "WriterState",
    "RotatingLogError",
    "CreateFailure",
    "WriteFailure",
    "PruneFailure",
    "NameCollision",
    "monitoring",
    "policies",
    "safety",
]
