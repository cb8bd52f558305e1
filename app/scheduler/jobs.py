"""
app/scheduler/jobs.py

APScheduler-based poller for upstream rental table updates.

Schedule (all times UTC)
--------------------------
  dataset_refresh: every ``REFRESH_POLL_MINUTES`` minutes (default 60)

The job is cheap when nothing is due: ``RefreshService`` gates the actual
download on its persisted last-check timestamp, so polling often only
shortens the delay after a restart.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_refresh_settings
from app.services.refresh_service import RefreshService, get_refresh_service

logger = logging.getLogger(__name__)


def run_dataset_refresh(refresh_service: RefreshService) -> None:
    """
    Run one refresh check. Failures are logged by the service.
    """
    logger.info("Scheduler: dataset_refresh starting")
    updated = refresh_service.check_for_updates()
    logger.info("Scheduler: dataset_refresh complete updated=%s", updated)


def build_scheduler(
    refresh_service: RefreshService | None = None,
    *,
    poll_minutes: int | None = None,
) -> BackgroundScheduler:
    """
    Build and register the periodic refresh job.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    service = refresh_service or get_refresh_service()
    interval = poll_minutes if poll_minutes is not None else get_refresh_settings().poll_minutes

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        run_dataset_refresh,
        trigger="interval",
        minutes=max(1, interval),
        args=[service],
        id="dataset_refresh",
        name="Rental dataset refresh check",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=3600,
    )
    return scheduler
