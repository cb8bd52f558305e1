"""
app/api/routers/rental_data.py

Read-only dataset endpoints: records, cities and housing categories.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.domain.ontario_cities import ONTARIO_CITIES
from app.domain.rental_record import HOUSING_CATEGORIES
from app.schemas.comparison import CitiesResponse, HousingCategoryResponse, RentalDataResponse
from app.schemas.snapshot import RentalRecordPayload
from app.services.lookup_engine import RentLookupEngine, get_rent_lookup_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["rental-data"])

DATASET_CACHE_CONTROL = "max-age=86400"


@router.get("/data", response_model=RentalDataResponse, response_model_exclude_none=True)
def get_rental_data(
    response: Response,
    city: str | None = Query(default=None, description="City to filter on"),
    beds: str | None = Query(default=None, description="Bedroom bucket to filter on"),
    engine: RentLookupEngine = Depends(get_rent_lookup_engine),
) -> RentalDataResponse:
    """
    Return records for one city and bedroom bucket, or the whole dataset.
    """

    city = (city or "").strip()
    beds = (beds or "").strip()

    if city and beds:
        records = engine.filter_records(city, beds)
        payload = RentalDataResponse(
            data=[RentalRecordPayload.from_domain(record) for record in records],
            categories=engine.available_categories(city, beds),
        )
    else:
        records = engine.records()
        if not records:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Rental data is temporarily unavailable.",
            )
        payload = RentalDataResponse(
            data=[RentalRecordPayload.from_domain(record) for record in records],
            categories=engine.all_categories(),
            cities=engine.available_cities(),
        )

    response.headers["Cache-Control"] = DATASET_CACHE_CONTROL
    return payload


@router.get("/cities", response_model=CitiesResponse)
def list_cities(engine: RentLookupEngine = Depends(get_rent_lookup_engine)) -> CitiesResponse:
    """
    Cities with survey data, or the static Ontario list while data is unavailable.
    """

    cities = engine.available_cities()
    if not cities:
        logger.warning("Dataset unavailable; serving static city list count=%s", len(ONTARIO_CITIES))
        return CitiesResponse(cities=sorted(ONTARIO_CITIES), from_dataset=False)
    return CitiesResponse(cities=cities, from_dataset=True)


@router.get("/categories", response_model=list[HousingCategoryResponse])
def list_categories() -> list[HousingCategoryResponse]:
    return [
        HousingCategoryResponse(name=category.name, description=category.description)
        for category in HOUSING_CATEGORIES
    ]
