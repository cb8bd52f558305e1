"""
app/repositories/snapshot_repository.py

File persistence for the precomputed rental dataset snapshot.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from app.domain.rental_record import DatasetMetadata, RentalRecord
from app.schemas.snapshot import RentalRecordPayload, SnapshotDocument, SnapshotMetadataPayload

logger = logging.getLogger(__name__)


class SnapshotFormatError(ValueError):
    """
    Raised when a snapshot document cannot be read or does not match its schema.
    """


def parse_snapshot_document(payload: Any) -> SnapshotDocument:
    """
    Validate a decoded JSON payload as a snapshot document.
    """

    try:
        return SnapshotDocument.model_validate(payload)
    except ValidationError as exc:
        raise SnapshotFormatError(f"Snapshot document is malformed: {exc.error_count()} error(s).") from exc


class SnapshotRepository:
    """
    Repository responsible for reading and writing the snapshot file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> SnapshotDocument | None:
        """
        Read the snapshot, returning None when no file exists.
        """

        if not self.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SnapshotFormatError(f"Snapshot file {self.path} could not be read: {exc}") from exc
        return parse_snapshot_document(payload)

    def read_metadata(self) -> DatasetMetadata | None:
        """
        Return stored metadata, or None when absent or unreadable.
        """

        try:
            document = self.load()
        except SnapshotFormatError as exc:
            logger.warning("Snapshot metadata unreadable path=%s error=%s", self.path, exc)
            return None
        if document is None or document.metadata is None:
            return None
        return document.metadata.to_domain()

    def save(self, records: Sequence[RentalRecord], metadata: DatasetMetadata) -> None:
        """
        Atomically replace the snapshot file.
        """

        document = SnapshotDocument(
            metadata=SnapshotMetadataPayload.from_domain(metadata),
            data=[RentalRecordPayload.from_domain(record) for record in records],
        )
        body = document.model_dump_json(by_alias=True, indent=2)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".snapshot-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(body)
            os.replace(tmp_name, self.path)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info(
            "Snapshot written path=%s records=%s size_mb=%.2f",
            self.path,
            len(records),
            self.path.stat().st_size / 1024 / 1024,
        )
