"""
Build the rental dataset snapshot from CLI.
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

from app.config import get_cache_settings, get_snapshot_settings
from app.logging_utils import configure_logging
from app.repositories.snapshot_repository import SnapshotRepository
from app.repositories.timestamp_store import build_timestamp_store
from app.schemas.snapshot import SnapshotMetadataPayload
from app.services.dataset_acquirer import get_dataset_acquirer
from app.services.dataset_metadata import build_metadata


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Download the rental table and write the dataset snapshot.")
    parser.add_argument(
        "--output",
        dest="output",
        type=Path,
        default=None,
        help="Snapshot file to write. Defaults to SNAPSHOT_PATH.",
    )
    parser.add_argument(
        "--signal",
        dest="signal",
        action="store_true",
        help="Advance the cache invalidation marker after writing.",
    )
    args = parser.parse_args(argv)

    configure_logging()

    output = args.output or get_snapshot_settings().path
    if output is None:
        parser.error("No output path: pass --output or set SNAPSHOT_PATH.")

    records = get_dataset_acquirer().fetch_remote()
    if not records:
        print(json.dumps({"status": "failed", "records": 0}, indent=2))
        return 1

    metadata = build_metadata(records)
    SnapshotRepository(output).save(records, metadata)

    if args.signal:
        build_timestamp_store(get_cache_settings().signal_path).write(time.time())

    payload = {
        "status": "ok",
        "output": str(output),
        "metadata": SnapshotMetadataPayload.from_domain(metadata).model_dump(by_alias=True),
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
