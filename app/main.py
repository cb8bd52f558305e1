from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI

from app.config import get_refresh_settings
from app.logging_utils import configure_logging


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Start the dataset refresh scheduler on boot when enabled; shut it down on exit."""
    log = logging.getLogger(__name__)
    if not get_refresh_settings().enabled:
        log.info("Dataset refresh disabled; scheduler not started")
        yield
        return

    from app.scheduler.jobs import build_scheduler

    scheduler = build_scheduler()
    scheduler.start()
    log.info("Scheduler started with %d jobs", len(scheduler.get_jobs()))
    try:
        yield
    finally:
        scheduler.shutdown(wait=True)
        log.info("Scheduler shut down")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    configure_logging()

    application = FastAPI(
        title="RentFair Ontario API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import comparison_router, rental_data_router

    application.include_router(comparison_router)
    application.include_router(rental_data_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok", "service": "rentfair-ontario"}

    return application


app = create_app()
