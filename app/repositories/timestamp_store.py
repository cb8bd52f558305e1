"""
app/repositories/timestamp_store.py

Monotonic timestamp markers used for cache invalidation and refresh gating.

A file marker lets several worker processes sharing a filesystem observe the
same event; the in-memory store covers single-process deployments.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class TimestampStore(Protocol):
    def read(self) -> float | None: ...

    def write(self, timestamp: float) -> None: ...


class FileTimestampStore:
    """
    Timestamp persisted as plain text in one file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> float | None:
        try:
            raw = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Timestamp marker unreadable path=%s error=%s", self.path, exc)
            return None
        try:
            return float(raw)
        except ValueError:
            logger.warning("Timestamp marker malformed path=%s content=%r", self.path, raw[:40])
            return None

    def write(self, timestamp: float) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(repr(float(timestamp)), encoding="utf-8")


class InMemoryTimestampStore:
    """
    Process-local timestamp marker.
    """

    def __init__(self, timestamp: float | None = None) -> None:
        self._timestamp = timestamp
        self._lock = threading.Lock()

    def read(self) -> float | None:
        with self._lock:
            return self._timestamp

    def write(self, timestamp: float) -> None:
        with self._lock:
            self._timestamp = float(timestamp)


def build_timestamp_store(path: Path | None) -> TimestampStore:
    """File-backed store when a path is configured, in-memory otherwise."""
    if path is None:
        return InMemoryTimestampStore()
    return FileTimestampStore(path)
