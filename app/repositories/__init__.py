"""
app/repositories package marker.
"""

from app.repositories.snapshot_repository import (
    SnapshotFormatError,
    SnapshotRepository,
    parse_snapshot_document,
)
from app.repositories.timestamp_store import (
    FileTimestampStore,
    InMemoryTimestampStore,
    TimestampStore,
    build_timestamp_store,
)

__all__ = [
    "FileTimestampStore",
    "InMemoryTimestampStore",
    "SnapshotFormatError",
    "SnapshotRepository",
    "TimestampStore",
    "build_timestamp_store",
    "parse_snapshot_document",
]
