"""
Monitor backends

A monitor receives counter, gauge and histogram updates from a rotating
log writer. Any object with the three record_* methods can be used.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Tuple
import threading


def _key(name: str, tags: Optional[Dict[str, str]]) -> Tuple[str, Tuple]:
    return name, tuple(sorted((tags or {}).items()))


class Monitor:
    """Base monitor interface."""

    def record_counter(
        self,
        name: str,
        value: int,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        raise NotImplementedError

    def record_gauge(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        raise NotImplementedError

    def record_histogram(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None
    ) -> None:
        raise NotImplementedError


class NullMonitor(Monitor):
    """Monitor that discards everything."""

    def record_counter(self, name, value, tags=None) -> None:
        pass

    def record_gauge(self, name, value, tags=None) -> None:
        pass

    def record_histogram(self, name, value, tags=None) -> None:
        pass


class InMemoryMonitor(Monitor):
    """
    Monitor that keeps values in memory.

    Useful for tests and for exposing writer metrics through an
    application's own status endpoint.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[Tuple, int] = {}
        self._gauges: Dict[Tuple, float] = {}
        self._histograms: Dict[Tuple, List[float]] = {}

    def record_counter(self, name, value, tags=None) -> None:
        key = _key(name, tags)
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + value

    def record_gauge(self, name, value, tags=None) -> None:
        with self._lock:
            self._gauges[_key(name, tags)] = value

    def record_histogram(self, name, value, tags=None) -> None:
        with self._lock:
            self._histograms.setdefault(_key(name, tags), []).append(value)

    def get_counter(self, name: str, tags: Optional[Dict[str, str]] = None) -> int:
        with self._lock:
            return self._counters.get(_key(name, tags), 0)

    def get_gauge(self, name: str, tags: Optional[Dict[str, str]] = None) -> float:
        with self._lock:
            return self._gauges.get(_key(name, tags), 0.0)

    def get_histogram(self, name: str, tags: Optional[Dict[str, str]] = None) -> List[float]:
        with self._lock:
            return list(self._histograms.get(_key(name, tags), []))

    def reset(self) -> None:
        """Clear all recorded values."""
        with self._lock:
            self._counters.clear()
            self._gauges.clear()
            self._histograms.clear()
