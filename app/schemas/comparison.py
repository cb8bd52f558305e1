"""
app/schemas/comparison.py

Response schemas for rent comparison and dataset endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.snapshot import RentalRecordPayload


class ComparisonResponse(BaseModel):
    """
    API response model for one rent comparison.
    """

    model_config = ConfigDict(populate_by_name=True)

    average: float = Field(..., gt=0)
    delta: float
    percent: float
    data_age: int | None = Field(default=None, alias="dataAge")
    data_age_mention: str = Field(default="", alias="dataAgeMention")
    adjusted_average: float | None = Field(default=None, alias="adjustedAverage")
    adjustment_applied: bool = Field(default=False, alias="adjustmentApplied")
    category: str | None = None


class RentalDataResponse(BaseModel):
    """
    Filtered records plus the categories available for them.
    """

    data: list[RentalRecordPayload]
    categories: list[str]
    cities: list[str] | None = None


class CitiesResponse(BaseModel):
    cities: list[str]
    from_dataset: bool = Field(default=True, alias="fromDataset")

    model_config = ConfigDict(populate_by_name=True)


class HousingCategoryResponse(BaseModel):
    name: str
    description: str
