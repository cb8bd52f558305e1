"""
app/services/lookup_engine.py

Average-rent lookup over the cached rental dataset.

City names in the survey are inconsistent ("Ottawa-Gatineau, Ontario part",
"St. Catharines-Niagara", ...), so a query walks an ordered cascade of
matching strategies and stops at the first one that finds records:

    exact            city part of the geography equals the query
    partial          geography contains the query
    variant          St./Saint and hyphen/space spellings, known aliases
    metro            satellite city mapped onto its metropolitan area
    closest_bedroom  same city, nearest bedroom bucket

When a category filter finds nothing the cascade runs once more without it.
"""

from __future__ import annotations

import logging
import math
import re
from functools import lru_cache
from statistics import fmean
from typing import Callable, Iterable, Protocol, Sequence

from app.domain.rental_record import AverageRentResult, RentalRecord
from app.normalization.value_normalizer import bedroom_scale, normalize_bedrooms
from app.services.dataset_acquirer import get_dataset_acquirer

logger = logging.getLogger(__name__)

NAME_VARIANT_ALIASES: dict[str, tuple[str, ...]] = {
    "ottawa-gatineau": ("Ottawa", "Gatineau", "Ottawa-Gatineau, Ontario part"),
}

_OTTAWA_METRO = ("Ottawa-Gatineau, Ontario part", "Ottawa-Gatineau")
_TORONTO_METRO = ("Toronto",)

METRO_AREA_ALIASES: dict[str, tuple[str, ...]] = {
    "mississauga": _TORONTO_METRO,
    "brampton": _TORONTO_METRO,
    "vaughan": _TORONTO_METRO,
    "markham": _TORONTO_METRO,
    "richmond hill": _TORONTO_METRO,
    "oakville": _TORONTO_METRO,
    "burlington": ("Hamilton",),
    "ottawa": _OTTAWA_METRO,
    "gatineau": _OTTAWA_METRO,
    "kitchener": ("Kitchener-Cambridge-Waterloo",),
    "cambridge": ("Kitchener-Cambridge-Waterloo",),
    "waterloo": ("Kitchener-Cambridge-Waterloo",),
    "st. catharines": ("St. Catharines-Niagara",),
    "niagara falls": ("St. Catharines-Niagara",),
    "welland": ("St. Catharines-Niagara",),
    "sudbury": ("Greater Sudbury",),
}

_SAINT_ABBREVIATION = re.compile(r"\bst\b\.?", re.IGNORECASE)
_SAINT_WORD = re.compile(r"\bsaint\b", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^\d.]")

_CITY_SUFFIXES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern)
    for pattern in (
        r", Ontario$",
        r", ON$",
        r" \(Ontario\)$",
        r" Ontario$",
        r" CMA$",
        r" CA$",
        r" \(CMA\)$",
        r" \(CA\)$",
        r" Census Metropolitan Area$",
        r" Census Agglomeration$",
        r" Economic Region$",
    )
)


class RecordSource(Protocol):
    def acquire(self) -> list[RentalRecord]: ...


def city_variants(city: str) -> list[str]:
    """
    Alternative spellings of a city name, excluding the name itself.
    """

    candidates: list[str] = []
    if _SAINT_ABBREVIATION.search(city):
        candidates.append(_SAINT_ABBREVIATION.sub("Saint", city, count=1))
    elif _SAINT_WORD.search(city):
        candidates.append(_SAINT_WORD.sub("St.", city, count=1))

    if "-" in city:
        candidates.append(city.replace("-", " "))
    elif " " in city:
        candidates.append(re.sub(r"\s+", "-", city))

    candidates.extend(NAME_VARIANT_ALIASES.get(city.lower(), ()))

    lowered_city = city.lower()
    seen: set[str] = set()
    variants: list[str] = []
    for candidate in candidates:
        key = candidate.lower()
        if key == lowered_city or key in seen:
            continue
        seen.add(key)
        variants.append(candidate)
    return variants


def clean_city_name(geography: str) -> str:
    """
    Strip province and census-area designations from a geography label.
    """

    city = geography
    for pattern in _CITY_SUFFIXES:
        city = pattern.sub("", city)
    return city.strip()


def parse_rent_value(raw: str) -> float | None:
    """
    Parse a scraped price such as "$1,500" or None when no number remains.
    """

    cleaned = _NON_NUMERIC.sub("", raw or "")
    try:
        return float(cleaned)
    except ValueError:
        return None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _city_equals(record: RentalRecord, name: str) -> bool:
    return record.city.lower() == name.lower()


def _geography_contains(record: RentalRecord, name: str) -> bool:
    return name.lower() in record.geography.lower()


def _name_matches(record: RentalRecord, name: str) -> bool:
    return _city_equals(record, name) or _geography_contains(record, name)


class RentLookupEngine:
    """
    Stateless queries over the records provided by a record source.
    """

    def __init__(self, source: RecordSource) -> None:
        self._source = source

    def average(self, city: str, bedrooms: str, category: str | None = None) -> AverageRentResult:
        """
        Average rent for a city and bedroom bucket, optionally one category.
        """

        query_city = (city or "").strip()
        bucket = normalize_bedrooms((bedrooms or "").strip())
        if not query_city or not bucket:
            return AverageRentResult.empty()

        try:
            records = self._source.acquire()
            if not records:
                return AverageRentResult.empty()

            category_filters: list[str | None] = [category, None] if category else [None]
            for category_filter in category_filters:
                strategy, matches = self._match(records, query_city, bucket, category_filter)
                if matches:
                    logger.debug(
                        "Average rent match city=%r beds=%s category=%s strategy=%s records=%s",
                        query_city,
                        bucket,
                        category_filter,
                        strategy,
                        len(matches),
                    )
                    return self._aggregate(matches, strategy=strategy, category=category_filter)
                if category_filter:
                    logger.info(
                        "No records for category; retrying without it city=%r beds=%s category=%s",
                        query_city,
                        bucket,
                        category_filter,
                    )
        except Exception as exc:
            logger.exception("Average rent lookup failed city=%r beds=%s error=%s", query_city, bucket, exc)
            return AverageRentResult.empty()

        logger.info("No rental data matched city=%r beds=%s", query_city, bucket)
        return AverageRentResult.empty()

    def records(self) -> list[RentalRecord]:
        return self._source.acquire()

    def available_cities(self) -> list[str]:
        """
        Sorted display names of every city in the dataset.
        """

        return sorted({clean_city_name(record.geography) for record in self._source.acquire()})

    def all_categories(self) -> list[str]:
        return sorted({record.category for record in self._source.acquire() if record.category})

    def available_categories(self, city: str, bedrooms: str) -> list[str]:
        """
        Categories present for a city and bedroom bucket, in first-seen order.
        """

        categories = (record.category for record in self.filter_records(city, bedrooms))
        return list(dict.fromkeys(category for category in categories if category))

    def filter_records(self, city: str, bedrooms: str) -> list[RentalRecord]:
        """
        Records whose geography names the city, for one bedroom bucket.
        """

        query_city = (city or "").strip()
        bucket = normalize_bedrooms((bedrooms or "").strip())
        if not query_city or not bucket:
            return []
        return [
            record
            for record in self._source.acquire()
            if record.bedrooms == bucket and _name_matches(record, query_city)
        ]

    def _match(
        self,
        records: Sequence[RentalRecord],
        city: str,
        bucket: str,
        category: str | None,
    ) -> tuple[str | None, list[RentalRecord]]:
        strategies: tuple[tuple[str, Callable[[], list[RentalRecord]]], ...] = (
            ("exact", lambda: self._select(records, bucket, category, lambda r: _city_equals(r, city))),
            ("partial", lambda: self._select(records, bucket, category, lambda r: _geography_contains(r, city))),
            ("variant", lambda: self._first_alias_match(records, bucket, category, city_variants(city))),
            (
                "metro",
                lambda: self._first_alias_match(
                    records, bucket, category, METRO_AREA_ALIASES.get(city.lower(), ())
                ),
            ),
            ("closest_bedroom", lambda: self._closest_bedroom(records, city, bucket, category)),
        )
        for name, strategy in strategies:
            matches = strategy()
            if matches:
                return name, matches
        return None, []

    @staticmethod
    def _select(
        records: Iterable[RentalRecord],
        bucket: str | None,
        category: str | None,
        predicate: Callable[[RentalRecord], bool],
    ) -> list[RentalRecord]:
        return [
            record
            for record in records
            if (bucket is None or record.bedrooms == bucket)
            and (not category or record.category == category)
            and predicate(record)
        ]

    def _first_alias_match(
        self,
        records: Sequence[RentalRecord],
        bucket: str,
        category: str | None,
        names: Iterable[str],
    ) -> list[RentalRecord]:
        for name in names:
            matches = self._select(records, bucket, category, lambda r, n=name: _name_matches(r, n))
            if matches:
                return matches
        return []

    def _closest_bedroom(
        self,
        records: Sequence[RentalRecord],
        city: str,
        bucket: str,
        category: str | None,
    ) -> list[RentalRecord]:
        requested = bedroom_scale(bucket)
        if requested is None:
            return []

        groups: dict[str, list[RentalRecord]] = {}
        for record in self._select(records, None, category, lambda r: _name_matches(r, city)):
            groups.setdefault(record.bedrooms, []).append(record)

        best_group: list[RentalRecord] = []
        best_distance: int | None = None
        for group_bucket, group in groups.items():
            scale = bedroom_scale(group_bucket)
            if scale is None:
                continue
            distance = abs(scale - requested)
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_group = group
        return best_group

    @staticmethod
    def _aggregate(
        matches: Sequence[RentalRecord],
        *,
        strategy: str | None,
        category: str | None,
    ) -> AverageRentResult:
        values = [value for value in (parse_rent_value(record.value) for record in matches) if value is not None]
        if not values:
            return AverageRentResult(value=None, category=category, strategy=strategy)

        ages = [record.data_age_months for record in matches if record.data_age_months is not None]
        return AverageRentResult(
            value=fmean(values),
            data_age_months=_round_half_up(fmean(ages)) if ages else None,
            category=category,
            strategy=strategy,
            sample_size=len(values),
        )


@lru_cache(maxsize=1)
def get_rent_lookup_engine() -> RentLookupEngine:
    """
    Build and cache the lookup engine over the shared dataset acquirer.
    """

    return RentLookupEngine(get_dataset_acquirer())
