"""
app/mappers/field_identifier.py

Heuristic column detection for the rental market CSV.

Upstream column names are not stable, so each canonical role is resolved by
substring rules against the lower-cased header. A rename that defeats every
rule leaves the role unmapped; callers treat "" as "not available".
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from app.domain.rental_record import FieldMap

logger = logging.getLogger(__name__)

FIELD_RULES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("geography", ("geo", "location", "city", "geography")),
    (
        "bedrooms",
        ("bedroom", "room", "type of unit", "unit type", "apartment type", "dwelling type"),
    ),
    ("value", ("value", "price", "rent", "amount", "cost")),
    ("ref_date", ("ref", "date", "period", "year", "time")),
    (
        "structure_type",
        ("type of structure", "structure", "building type", "dwelling structure"),
    ),
)


def match_columns(
    columns: Iterable[str],
    rules: Sequence[tuple[str, Sequence[str]]] = FIELD_RULES,
) -> dict[str, str]:
    """
    Assign the first column containing one of a role's substrings to that role.

    Columns are visited in order and one column may satisfy several roles.
    """

    resolved: dict[str, str] = {role: "" for role, _ in rules}
    for column in columns:
        lowered = column.lower()
        for role, needles in rules:
            if resolved[role]:
                continue
            if any(needle in lowered for needle in needles):
                resolved[role] = column
    return resolved


def identify_fields(sample: Mapping[str, str]) -> FieldMap:
    """
    Guess the canonical field map from one sample row.
    """

    resolved = match_columns(sample.keys())
    field_map = FieldMap(**resolved)
    unmapped = sorted(role for role, column in resolved.items() if not column)
    if unmapped:
        logger.warning("Field identification left roles unmapped roles=%s", unmapped)
    logger.debug("Resolved field map %s", field_map)
    return field_map
