"""
app/services/dataset_acquirer.py

Acquisition and in-memory caching of the processed rental dataset.

Sources are tried in order until one yields records:

    1. local snapshot file
    2. snapshot URL (when configured)
    3. Statistics Canada full-table download, processed in-process

Acquisition never raises to callers. Every failure is logged and an empty
list is returned, which callers read as "temporarily no data". Empty results
are not cached, so the next call retries.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable

from app.config import (
    get_cache_settings,
    get_external_http_settings,
    get_snapshot_settings,
    get_statcan_settings,
)
from app.connectors import ConnectorRequestError, SnapshotConnector, StatCanConnector
from app.domain.rental_record import RentalRecord
from app.logging_utils import log_event
from app.mappers.field_identifier import identify_fields
from app.repositories.snapshot_repository import (
    SnapshotFormatError,
    SnapshotRepository,
    parse_snapshot_document,
)
from app.repositories.timestamp_store import InMemoryTimestampStore, TimestampStore, build_timestamp_store
from app.schemas.snapshot import SnapshotDocument
from app.services.recency_selector import select_recent
from app.services.record_processor import parse_reference_date, process_raw_records

logger = logging.getLogger(__name__)


@dataclass
class DatasetCache:
    """
    Process-wide holder of the current record set.

    ``records`` is None until the first successful acquisition and after
    every invalidation.
    """

    records: tuple[RentalRecord, ...] | None = None
    cached_at: float = 0.0
    last_invalidation_check: float = 0.0

    def store(self, records: list[RentalRecord], now: float) -> None:
        self.records = tuple(records)
        self.cached_at = now

    def clear(self) -> None:
        self.records = None
        self.cached_at = 0.0


class DatasetAcquirer:
    """
    Loads, processes and memoizes the rental dataset.
    """

    def __init__(
        self,
        *,
        statcan_connector: StatCanConnector,
        snapshot_repository: SnapshotRepository | None = None,
        snapshot_connector: SnapshotConnector | None = None,
        invalidation_signal: TimestampStore | None = None,
        cache: DatasetCache | None = None,
        cache_ttl_seconds: float = 86400.0,
        invalidation_check_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._statcan = statcan_connector
        self._snapshot_repository = snapshot_repository
        self._snapshot_connector = snapshot_connector
        self._signal = invalidation_signal or InMemoryTimestampStore()
        self._cache = cache or DatasetCache()
        self._cache_ttl_seconds = cache_ttl_seconds
        self._invalidation_check_seconds = invalidation_check_seconds
        self._clock = clock

    @property
    def cache(self) -> DatasetCache:
        return self._cache

    def acquire(self) -> list[RentalRecord]:
        """
        Return the current record set, acquiring it on a cache miss.
        """

        now = self._clock()
        self._check_invalidation(now)

        cached = self._cache.records
        if cached is not None and now - self._cache.cached_at < self._cache_ttl_seconds:
            return list(cached)

        source = "snapshot"
        records = self._load_snapshot(now)
        if not records:
            source = "statcan"
            records = self.fetch_remote()

        if not records:
            log_event(logger, logging.ERROR, "dataset_unavailable", had_cache=cached is not None)
            return []

        self._cache.store(records, now)
        log_event(logger, logging.INFO, "dataset_acquired", source=source, records=len(records))
        return records

    def invalidate(self) -> None:
        """
        Drop the cached record set so the next acquisition reloads.
        """

        self._cache.clear()
        logger.info("Dataset cache invalidated")

    def fetch_remote(self) -> list[RentalRecord]:
        """
        Download and process the source table, bypassing the cache.
        """

        try:
            rows = self._statcan.fetch_table_rows()
        except ConnectorRequestError as exc:
            logger.error("Remote dataset fetch failed source=%s error=%s", self._statcan.source, exc)
            return []
        except Exception as exc:
            logger.exception(
                "Unhandled remote dataset failure source=%s error=%s",
                self._statcan.source,
                exc,
            )
            return []

        if not rows:
            logger.warning("Remote dataset fetch returned no rows source=%s", self._statcan.source)
            return []

        field_map = identify_fields(rows[0])
        processed = process_raw_records(rows, field_map, now=self._now_datetime())
        return select_recent(processed)

    def _check_invalidation(self, now: float) -> None:
        """
        Clear the cache when the invalidation marker moved since the last check.

        Checks are rate limited to one per configured interval.
        """

        previous_check = self._cache.last_invalidation_check
        if now - previous_check < self._invalidation_check_seconds:
            return
        self._cache.last_invalidation_check = now

        signalled_at = self._signal.read()
        if signalled_at is None or signalled_at <= previous_check:
            return
        if self._cache.records is not None:
            logger.info(
                "Cache invalidation detected signalled_at=%.3f last_check=%.3f",
                signalled_at,
                previous_check,
            )
            self._cache.clear()

    def _load_snapshot(self, now: float) -> list[RentalRecord]:
        document = self._read_local_snapshot()
        if document is None:
            document = self._fetch_remote_snapshot()
        if document is None or not document.data:
            return []
        return self._records_from_document(document, now)

    def _read_local_snapshot(self) -> SnapshotDocument | None:
        if self._snapshot_repository is None:
            return None
        try:
            document = self._snapshot_repository.load()
        except SnapshotFormatError as exc:
            logger.warning("Local snapshot rejected error=%s", exc)
            return None
        if document is not None and document.data:
            logger.info(
                "Loaded local snapshot path=%s records=%s",
                self._snapshot_repository.path,
                len(document.data),
            )
            return document
        return None

    def _fetch_remote_snapshot(self) -> SnapshotDocument | None:
        if self._snapshot_connector is None:
            return None
        try:
            document = parse_snapshot_document(self._snapshot_connector.fetch_document())
        except (ConnectorRequestError, SnapshotFormatError) as exc:
            logger.warning("Snapshot download failed url=%s error=%s", self._snapshot_connector.url, exc)
            return None
        logger.info(
            "Loaded snapshot from url=%s records=%s",
            self._snapshot_connector.url,
            len(document.data),
        )
        return document

    def _records_from_document(self, document: SnapshotDocument, now: float) -> list[RentalRecord]:
        """
        Convert snapshot payloads, recomputing data age against the current time.
        """

        current = datetime.fromtimestamp(now, tz=timezone.utc)
        records: list[RentalRecord] = []
        for payload in document.data:
            record = payload.to_domain()
            age, year = parse_reference_date(record.ref_date, current)
            if age is not None:
                record = dataclasses.replace(
                    record,
                    data_age_months=age,
                    year=record.year if record.year is not None else year,
                )
            records.append(record)
        return records

    def _now_datetime(self) -> datetime:
        return datetime.fromtimestamp(self._clock(), tz=timezone.utc)


@lru_cache(maxsize=1)
def get_dataset_acquirer() -> DatasetAcquirer:
    """
    Build and cache the process-wide dataset acquirer.
    """

    http_settings = get_external_http_settings()
    snapshot_settings = get_snapshot_settings()
    cache_settings = get_cache_settings()

    snapshot_connector = (
        SnapshotConnector(url=snapshot_settings.url, http_settings=http_settings)
        if snapshot_settings.url
        else None
    )
    return DatasetAcquirer(
        statcan_connector=StatCanConnector(
            settings=get_statcan_settings(),
            http_settings=http_settings,
        ),
        snapshot_repository=(
            SnapshotRepository(snapshot_settings.path) if snapshot_settings.path else None
        ),
        snapshot_connector=snapshot_connector,
        invalidation_signal=build_timestamp_store(cache_settings.signal_path),
        cache_ttl_seconds=cache_settings.ttl_seconds,
        invalidation_check_seconds=cache_settings.invalidation_check_seconds,
    )
