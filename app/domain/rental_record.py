"""
app/domain/rental_record.py

Domain models for the rental market dataset.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldMap:
    """
    Source column discovered for each canonical role, or "" when undetected.
    """

    geography: str = ""
    bedrooms: str = ""
    value: str = ""
    ref_date: str = ""
    structure_type: str = ""


@dataclass(frozen=True)
class RentalRecord:
    """
    One normalized rental market observation.

    ``value`` keeps the raw price text; consumers parse it at use time.
    """

    geography: str
    bedrooms: str
    value: str
    ref_date: str = ""
    data_age_months: int | None = None
    year: int | None = None
    structure_type: str = ""
    category: str = ""

    @property
    def city(self) -> str:
        """Geography label with everything after the first comma removed."""
        return self.geography.split(",")[0].strip()


@dataclass(frozen=True)
class HousingCategory:
    """
    Housing category offered as an optional comparison filter.
    """

    name: str
    description: str


HOUSING_CATEGORIES: tuple[HousingCategory, ...] = (
    HousingCategory("Multi-Plex", "Small residential buildings with 3-5 apartment units"),
    HousingCategory("Townhouse", "Row housing units sharing walls with adjacent units"),
    HousingCategory("Low-Rise", "Apartment buildings with 3-5 floors"),
    HousingCategory("Highrise", "Apartment buildings with 6 or more floors"),
)


@dataclass(frozen=True)
class DatasetMetadata:
    """
    Summary of one processed dataset, stored alongside the snapshot.
    """

    generated_at: str
    record_count: int
    data_year: int | None
    unique_bedroom_types: tuple[str, ...] = ()
    unique_cities: int = 0
    unique_structure_types: tuple[str, ...] = ()
    unique_categories: tuple[str, ...] = ()


@dataclass(frozen=True)
class AverageRentResult:
    """
    Outcome of one average-rent lookup.
    """

    value: float | None
    data_age_months: int | None = None
    category: str | None = None
    strategy: str | None = None
    sample_size: int = 0

    @classmethod
    def empty(cls) -> "AverageRentResult":
        return cls(value=None)
