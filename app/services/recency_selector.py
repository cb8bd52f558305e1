"""
app/services/recency_selector.py

Narrows a processed dataset to its most recent survey year.
"""

from __future__ import annotations

import logging
from typing import Sequence

from app.domain.rental_record import RentalRecord

logger = logging.getLogger(__name__)

# Years at or below this are treated as parse noise rather than survey years.
MIN_PLAUSIBLE_YEAR = 2008
MIN_RECENT_RECORDS = 10


def latest_year(records: Sequence[RentalRecord]) -> int | None:
    """Most recent year present in the records, ignoring records without one."""
    years = {record.year for record in records if record.year is not None}
    return max(years) if years else None


def select_recent(records: Sequence[RentalRecord]) -> list[RentalRecord]:
    """
    Keep only the latest year's records unless that leaves too few.

    The full set is returned when the latest year is implausible, or when the
    latest-year subset has fewer than ten records while the full set has at
    least ten.
    """

    full = list(records)
    year = latest_year(full)
    if year is None or year <= MIN_PLAUSIBLE_YEAR:
        return full

    recent = [record for record in full if record.year == year]
    if len(recent) < MIN_RECENT_RECORDS and len(full) >= MIN_RECENT_RECORDS:
        logger.info(
            "Too few records for latest year year=%s recent=%s total=%s; keeping full history",
            year,
            len(recent),
            len(full),
        )
        return full

    logger.info("Selected latest survey year year=%s records=%s", year, len(recent))
    return recent
