"""Policies module - Naming, rotation and retention decisions"""

from rolling_logger.policies.naming import generate_name, parse_timestamp, is_log_file
from rolling_logger.policies.rotation import RotationPolicy, should_rotate
from rolling_logger.policies.retention import RetentionManager, select_for_deletion

__all__ = [
    "generate_name",
    "parse_timestamp",
    "is_log_file",
    "RotationPolicy",
    "should_rotate",
    "RetentionManager",
    "select_for_deletion",
]
