"""
app/services/record_processor.py

Turns raw survey rows into canonical rental records.

Rows are filtered, never rejected with an error: a row that cannot yield a
geography, a price and a bedroom bucket is dropped and counted.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from datetime import date, datetime, timezone
from typing import Mapping, Sequence

from app.domain.rental_record import FieldMap, RentalRecord
from app.normalization.value_normalizer import map_structure_type_to_category, normalize_bedrooms

logger = logging.getLogger(__name__)

_ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{1,2}-\d{1,2}$")
_BARE_YEAR_PATTERN = re.compile(r"^\d{4}$")
_EMBEDDED_YEAR_PATTERN = re.compile(r"\b(20\d{2})\b")

_BEDROOM_KEY_HINTS = ("bedroom", "unit")
_BEDROOM_VALUE_HINTS = ("bedroom", "bachelor")
_DATE_KEY_HINTS = ("date", "period", "year", "ref")


def is_ontario_location(geography: str | None) -> bool:
    """
    Return True when a geography label names an Ontario location.
    """

    if not geography:
        return False
    return (
        geography.endswith(", Ontario")
        or "Ontario" in geography
        or "ON," in geography
        or ", ON" in geography
    )


def _parse_reference(text: str) -> date | None:
    """
    Parse reference period text as ISO date, bare year or embedded year.
    """

    if _ISO_DATE_PATTERN.match(text):
        year, month, day = (int(part) for part in text.split("-"))
        try:
            return date(year, month, day)
        except ValueError:
            pass
    if _BARE_YEAR_PATTERN.match(text):
        return date(int(text), 1, 1)
    match = _EMBEDDED_YEAR_PATTERN.search(text)
    if match:
        return date(int(match.group(1)), 1, 1)
    return None


def parse_reference_date(text: str | None, now: datetime | None = None) -> tuple[int | None, int | None]:
    """
    Return ``(data_age_months, year)`` for a reference period string.

    Both are None when no format matches. The age is negative for a
    reference date in the future.
    """

    if not text:
        return None, None
    reference = _parse_reference(text.strip())
    if reference is None:
        return None, None
    current = now or datetime.now(timezone.utc)
    months = (current.year - reference.year) * 12 + (current.month - reference.month)
    return months, reference.year


def _resolve_bedroom_text(row: Mapping[str, str], field_map: FieldMap) -> str:
    if field_map.bedrooms and row.get(field_map.bedrooms):
        return row[field_map.bedrooms]
    for key, value in row.items():
        lowered_key = key.lower()
        lowered_value = (value or "").lower()
        if any(hint in lowered_key for hint in _BEDROOM_KEY_HINTS) or any(
            hint in lowered_value for hint in _BEDROOM_VALUE_HINTS
        ):
            return value or ""
    return ""


def _resolve_date_text(row: Mapping[str, str], field_map: FieldMap) -> str:
    if field_map.ref_date and row.get(field_map.ref_date):
        return row[field_map.ref_date]
    for key, value in row.items():
        lowered_key = key.lower()
        if any(hint in lowered_key for hint in _DATE_KEY_HINTS) or _EMBEDDED_YEAR_PATTERN.search(
            value or ""
        ):
            return value or ""
    return ""


def _resolve_structure_text(row: Mapping[str, str], field_map: FieldMap) -> str:
    if field_map.structure_type:
        return row.get(field_map.structure_type) or ""
    return ""


def process_raw_records(
    rows: Sequence[Mapping[str, str]],
    field_map: FieldMap,
    *,
    now: datetime | None = None,
) -> list[RentalRecord]:
    """
    Filter and normalize raw rows into rental records.
    """

    current = now or datetime.now(timezone.utc)
    dropped: Counter[str] = Counter()
    records: list[RentalRecord] = []

    for row in rows:
        geography = row.get(field_map.geography) if field_map.geography else None
        value = row.get(field_map.value) if field_map.value else None
        if not geography or not value:
            dropped["missing_geography_or_value"] += 1
            continue
        if not is_ontario_location(geography):
            dropped["outside_ontario"] += 1
            continue

        ref_date = _resolve_date_text(row, field_map)
        data_age_months, year = parse_reference_date(ref_date, current)
        structure_type = _resolve_structure_text(row, field_map)
        bedrooms = normalize_bedrooms(_resolve_bedroom_text(row, field_map))

        if not bedrooms:
            dropped["missing_bedrooms"] += 1
            continue

        records.append(
            RentalRecord(
                geography=geography,
                bedrooms=bedrooms,
                value=value,
                ref_date=ref_date,
                data_age_months=data_age_months,
                year=year,
                structure_type=structure_type,
                category=map_structure_type_to_category(structure_type),
            )
        )

    logger.info(
        "Processed rental rows rows_in=%s rows_kept=%s dropped=%s",
        len(rows),
        len(records),
        dict(dropped),
    )
    return records
