"""
app/services/dataset_metadata.py

Dataset summaries used to detect meaningful upstream changes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from app.domain.rental_record import DatasetMetadata, RentalRecord
from app.services.recency_selector import latest_year


def _unique_in_order(values: list[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def build_metadata(records: Sequence[RentalRecord], *, now: datetime | None = None) -> DatasetMetadata:
    """
    Summarize a processed record set.
    """

    generated = now or datetime.now(timezone.utc)
    return DatasetMetadata(
        generated_at=generated.isoformat(),
        record_count=len(records),
        data_year=latest_year(records),
        unique_bedroom_types=_unique_in_order([record.bedrooms for record in records]),
        unique_cities=len({record.city for record in records}),
        unique_structure_types=_unique_in_order(
            [record.structure_type or "Unknown" for record in records]
        ),
        unique_categories=_unique_in_order([record.category or "Uncategorized" for record in records]),
    )


def is_data_updated(previous: DatasetMetadata | None, current: DatasetMetadata) -> bool:
    """
    Return True when the new summary differs in a way consumers would notice.

    Missing previous metadata always counts as an update. Bedroom buckets are
    compared as sets; the order they are first seen in carries no meaning.
    """

    if previous is None:
        return True
    if previous.record_count != current.record_count:
        return True
    if previous.data_year != current.data_year:
        return True
    if sorted(previous.unique_bedroom_types) != sorted(current.unique_bedroom_types):
        return True
    return previous.unique_cities != current.unique_cities
