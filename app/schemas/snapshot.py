"""
app/schemas/snapshot.py

JSON shapes of the precomputed dataset snapshot.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.domain.rental_record import DatasetMetadata, RentalRecord


class RentalRecordPayload(BaseModel):
    """
    Serialized rental record, camelCase on the wire.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    geography: str
    bedrooms: str
    value: str
    ref_date: str = Field(default="", alias="refDate")
    data_age_months: int | None = Field(default=None, alias="dataAgeMonths")
    year: int | None = None
    structure_type: str = Field(default="", alias="structureType")
    category: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("ref_date", "structure_type", "category", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_domain(cls, record: RentalRecord) -> "RentalRecordPayload":
        return cls(
            geography=record.geography,
            bedrooms=record.bedrooms,
            value=record.value,
            ref_date=record.ref_date,
            data_age_months=record.data_age_months,
            year=record.year,
            structure_type=record.structure_type,
            category=record.category,
        )

    def to_domain(self) -> RentalRecord:
        return RentalRecord(
            geography=self.geography,
            bedrooms=self.bedrooms,
            value=self.value,
            ref_date=self.ref_date,
            data_age_months=self.data_age_months,
            year=self.year,
            structure_type=self.structure_type,
            category=self.category,
        )


class SnapshotMetadataPayload(BaseModel):
    """
    Dataset summary stored beside the snapshot records.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    generated_at: str | None = Field(default=None, alias="generatedAt")
    record_count: int | None = Field(default=None, alias="recordCount")
    data_year: int | None = Field(default=None, alias="dataYear")
    unique_bedroom_types: list[str] = Field(default_factory=list, alias="uniqueBedroomTypes")
    unique_cities: int | None = Field(default=None, alias="uniqueCities")
    unique_structure_types: list[str] = Field(default_factory=list, alias="uniqueStructureTypes")
    unique_categories: list[str] = Field(default_factory=list, alias="uniqueCategories")

    @classmethod
    def from_domain(cls, metadata: DatasetMetadata) -> "SnapshotMetadataPayload":
        return cls(
            generated_at=metadata.generated_at,
            record_count=metadata.record_count,
            data_year=metadata.data_year,
            unique_bedroom_types=list(metadata.unique_bedroom_types),
            unique_cities=metadata.unique_cities,
            unique_structure_types=list(metadata.unique_structure_types),
            unique_categories=list(metadata.unique_categories),
        )

    def to_domain(self) -> DatasetMetadata | None:
        """Return domain metadata, or None when the summary is blank."""
        if self.record_count is None:
            return None
        return DatasetMetadata(
            generated_at=self.generated_at or "",
            record_count=self.record_count,
            data_year=self.data_year,
            unique_bedroom_types=tuple(self.unique_bedroom_types),
            unique_cities=self.unique_cities or 0,
            unique_structure_types=tuple(self.unique_structure_types),
            unique_categories=tuple(self.unique_categories),
        )


class SnapshotDocument(BaseModel):
    """
    Top-level snapshot file: ``{"metadata": {...}, "data": [...]}``.
    """

    model_config = ConfigDict(extra="ignore")

    metadata: SnapshotMetadataPayload | None = None
    data: list[RentalRecordPayload]
