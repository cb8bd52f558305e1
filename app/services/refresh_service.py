"""
app/services/refresh_service.py

Periodic check for a newer upstream rental table.

A due check downloads and processes the source table, writes a fresh
snapshot and compares its summary with the previous one. When they differ the
invalidation marker is advanced and the in-process cache dropped, so every
worker sharing the marker reloads on its next lookup.
"""

from __future__ import annotations

import logging
import threading
import time
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable

from app.config import get_cache_settings, get_refresh_settings, get_snapshot_settings
from app.domain.rental_record import DatasetMetadata
from app.logging_utils import log_event
from app.repositories.snapshot_repository import SnapshotRepository
from app.repositories.timestamp_store import InMemoryTimestampStore, TimestampStore, build_timestamp_store
from app.services.dataset_acquirer import DatasetAcquirer, get_dataset_acquirer
from app.services.dataset_metadata import build_metadata, is_data_updated

logger = logging.getLogger(__name__)


class RefreshService:
    """
    Detects upstream dataset changes and signals cache invalidation.
    """

    def __init__(
        self,
        *,
        acquirer: DatasetAcquirer,
        snapshot_repository: SnapshotRepository | None = None,
        invalidation_signal: TimestampStore | None = None,
        last_check_store: TimestampStore | None = None,
        check_interval_seconds: float = 86400.0,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._acquirer = acquirer
        self._snapshot_repository = snapshot_repository
        self._signal = invalidation_signal or InMemoryTimestampStore()
        self._last_check = last_check_store or InMemoryTimestampStore()
        self._check_interval_seconds = check_interval_seconds
        self._clock = clock
        self._running = threading.Lock()
        self._last_metadata: DatasetMetadata | None = None

    def is_due(self, now: float | None = None) -> bool:
        last_checked = self._last_check.read()
        if last_checked is None:
            return True
        current = self._clock() if now is None else now
        return current - last_checked >= self._check_interval_seconds

    def check_for_updates(self) -> bool:
        """
        Run one update check and return True when the dataset changed.

        Overlapping calls return False immediately, as do checks made before
        the configured interval has elapsed.
        """

        if not self._running.acquire(blocking=False):
            logger.info("Refresh check already running; skipping")
            return False
        try:
            return self._check()
        except Exception as exc:
            logger.exception("Refresh check failed error=%s", exc)
            return False
        finally:
            self._running.release()

    def _check(self) -> bool:
        now = self._clock()
        if not self.is_due(now):
            logger.debug("Refresh check not due last_check=%s", self._last_check.read())
            return False

        self._last_check.write(now)
        previous = self._previous_metadata()

        records = self._acquirer.fetch_remote()
        if not records:
            log_event(logger, logging.WARNING, "refresh_no_data")
            return False

        current = build_metadata(records, now=datetime.fromtimestamp(now, tz=timezone.utc))
        if self._snapshot_repository is not None:
            self._snapshot_repository.save(records, current)
        self._last_metadata = current

        updated = is_data_updated(previous, current)
        if updated:
            self._signal.write(self._clock())
            self._acquirer.invalidate()

        log_event(
            logger,
            logging.INFO,
            "refresh_completed",
            updated=updated,
            records=current.record_count,
            data_year=current.data_year,
            cities=current.unique_cities,
        )
        return updated

    def _previous_metadata(self) -> DatasetMetadata | None:
        if self._snapshot_repository is None:
            return self._last_metadata
        return self._snapshot_repository.read_metadata()


@lru_cache(maxsize=1)
def get_refresh_service() -> RefreshService:
    """
    Build and cache the refresh service over the shared dataset acquirer.
    """

    refresh_settings = get_refresh_settings()
    snapshot_path = get_snapshot_settings().path
    return RefreshService(
        acquirer=get_dataset_acquirer(),
        snapshot_repository=SnapshotRepository(snapshot_path) if snapshot_path else None,
        invalidation_signal=build_timestamp_store(get_cache_settings().signal_path),
        last_check_store=build_timestamp_store(refresh_settings.last_check_path),
        check_interval_seconds=refresh_settings.check_interval_seconds,
    )
