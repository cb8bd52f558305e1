"""
app/normalization/value_normalizer.py

Normalization of bedroom labels and structure types into canonical buckets.
"""

from __future__ import annotations

import re

BEDROOM_BUCKETS: tuple[str, ...] = ("0", "1", "2", "3+")

_EXACT_BEDROOM_LABELS: dict[str, str] = {
    "bachelor units": "0",
    "one bedroom units": "1",
    "two bedroom units": "2",
    "three bedroom units": "3+",
}

# Order matters: "three or more" must not be caught by an earlier bucket.
_BEDROOM_SUBSTRINGS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("0", ("bachelor", "studio")),
    ("1", ("one", "1 bedroom")),
    ("2", ("two", "2 bedroom")),
    ("3+", ("three", "3 bedroom", "3+", "three or more")),
)

_DIGITS_PATTERN = re.compile(r"(\d+)")

STRUCTURE_CATEGORY_MAP: dict[str, str] = {
    "Row and apartment structures of three units and over": "Multi-Plex",
    "Row structures of three units and over": "Townhouse",
    "Apartment structures of three units and over": "Low-Rise",
    "Apartment structures of six units and over": "Highrise",
}


def normalize_bedrooms(label: str | None) -> str:
    """
    Map a bedroom label onto "0", "1", "2" or "3+".

    Unrecognized labels are returned unchanged.

    >>> normalize_bedrooms("Two bedroom units")
    '2'
    >>> normalize_bedrooms("5 bedroom")
    '3+'
    >>> normalize_bedrooms("penthouse")
    'penthouse'
    """

    if not label:
        return ""

    lowered = label.lower()
    exact = _EXACT_BEDROOM_LABELS.get(lowered)
    if exact is not None:
        return exact

    for bucket, needles in _BEDROOM_SUBSTRINGS:
        if any(needle in lowered for needle in needles):
            return bucket

    match = _DIGITS_PATTERN.search(label)
    if match:
        count = int(match.group(1))
        return "3+" if count >= 3 else match.group(1)

    return label


def map_structure_type_to_category(label: str | None) -> str:
    """
    Exact lookup of a survey structure type in the housing category table.
    """

    if not label:
        return ""
    return STRUCTURE_CATEGORY_MAP.get(label, "")


def bedroom_scale(bucket: str | None) -> int | None:
    """
    Position of a bedroom bucket on a 0-3 scale, or None when not numeric.
    """

    if not bucket:
        return None
    if bucket in BEDROOM_BUCKETS:
        return BEDROOM_BUCKETS.index(bucket)
    match = _DIGITS_PATTERN.search(bucket)
    if match is None:
        return None
    return min(int(match.group(1)), 3)
