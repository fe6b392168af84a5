"""
Rotation configuration management
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union


# Recognized configuration keys and their attribute names
CONFIG_KEYS: Dict[str, str] = {
    "maxLogMessageCount": "max_message_count",
    "maxLogDuration": "max_duration",
    "maxLogFileCount": "max_file_count",
    "baseName": "base_name",
    "logDirectory": "directory",
}

# (max_message_count, max_duration seconds, max_file_count)
VOLATILITY_PRESETS: Dict[str, tuple] = {
    "low": (100000, 7 * 24 * 3600, 30),
    "medium": (10000, 24 * 3600, 14),
    "high": (1000, 3600, 5),
}


@dataclass
class RotationConfig:
    """
    Rotating log writer configuration.

    The three thresholds are required; the core supplies no defaults
    for them. ``max_file_count`` of ``None`` disables pruning and ``0``
    retains only the active file.
    """

    max_message_count: int
    max_duration: float
    max_file_count: Optional[int]

    # File settings
    base_name: str = "log"
    directory: Optional[Union[str, Path]] = None
    encoding: str = "utf-8"
    buffer_size: int = -1  # -1 uses the io default

    # Retention settings
    background_prune: bool = False

    def __post_init__(self):
        """Validate configuration after initialization."""
        if isinstance(self.max_message_count, bool) or not isinstance(
            self.max_message_count, int
        ):
            raise ValueError("max_message_count must be an integer")
        if self.max_message_count < 1:
            raise ValueError("max_message_count must be at least 1")
        if self.max_duration is None or self.max_duration <= 0:
            raise ValueError("max_duration must be positive")
        if self.max_file_count is not None and self.max_file_count < 0:
            raise ValueError("max_file_count cannot be negative")
        if not self.base_name or not self.base_name.strip():
            raise ValueError("base_name cannot be empty")
        if "/" in self.base_name or "\\" in self.base_name:
            raise ValueError("base_name cannot contain path separators")

        # Convert directory to Path if it's a string
        if self.directory is None:
            self.directory = Path(".")
        elif isinstance(self.directory, str):
            self.directory = Path(self.directory)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], **overrides) -> "RotationConfig":
        """
        Create configuration from a mapping.

        Accepts the ``maxLogMessageCount`` / ``maxLogDuration`` /
        ``maxLogFileCount`` keys as well as the attribute names.

        Args:
            data: Mapping with configuration values
            **overrides: Attribute values taking precedence over ``data``

        Returns:
            New RotationConfig instance

        Raises:
            ValueError: If a required threshold is missing or invalid
        """
        values: Dict[str, Any] = {}
        for key, value in data.items():
            attr = CONFIG_KEYS.get(key, key)
            values[attr] = value
        values.update(overrides)

        missing = [
            name for name in ("max_message_count", "max_duration", "max_file_count")
            if name not in values
        ]
        if missing:
            raise ValueError(f"Missing required configuration: {', '.join(missing)}")

        return cls(**values)

    @classmethod
    def from_volatility(cls, volatility: str, **overrides) -> "RotationConfig":
        """
        Create configuration from a named volatility preset.

        High volatility rotates and prunes aggressively for processes
        that produce a lot of output on small disks.

        Args:
            volatility: One of "low", "medium", "high" (case-insensitive)
            **overrides: Attribute values replacing preset ones

        Returns:
            New RotationConfig instance

        Raises:
            ValueError: If volatility is not a known preset
        """
        key = volatility.lower()
        if key not in VOLATILITY_PRESETS:
            raise ValueError(f"Invalid volatility: {volatility}")

        max_messages, max_duration, max_files = VOLATILITY_PRESETS[key]
        values = {
            "max_message_count": max_messages,
            "max_duration": max_duration,
            "max_file_count": max_files,
        }
        values.update(overrides)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary using the external configuration keys
        """
        return {
            "maxLogMessageCount": self.max_message_count,
            "maxLogDuration": self.max_duration,
            "maxLogFileCount": self.max_file_count,
            "baseName": self.base_name,
            "logDirectory": str(self.directory),
        }
