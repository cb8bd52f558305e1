"""
app/api/routers/comparison.py

Rent comparison endpoint.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.dependencies import ComparisonQuery, get_comparison_query
from app.schemas.comparison import ComparisonResponse
from app.services.comparison_service import build_comparison
from app.services.lookup_engine import RentLookupEngine, get_rent_lookup_engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["comparison"])

COMPARISON_CACHE_CONTROL = "s-maxage=86400"


@router.get(
    "/compare",
    response_model=ComparisonResponse,
    response_model_exclude_none=True,
)
def compare_rent(
    response: Response,
    query: ComparisonQuery = Depends(get_comparison_query),
    engine: RentLookupEngine = Depends(get_rent_lookup_engine),
) -> ComparisonResponse:
    """
    Compare a monthly rent with the market average for a city and bedroom count.
    """

    result = engine.average(query.city, query.beds, query.category)
    if result.value is None or result.value <= 0:
        logger.info("Comparison miss city=%r beds=%s category=%s", query.city, query.beds, query.category)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No data available for the specified city and bedroom count",
        )

    comparison = build_comparison(result, query.price)
    response.headers["Cache-Control"] = COMPARISON_CACHE_CONTROL
    return ComparisonResponse(
        average=comparison.average,
        delta=comparison.delta,
        percent=comparison.percent,
        data_age=comparison.data_age_months,
        data_age_mention=comparison.data_age_mention,
        adjusted_average=comparison.adjusted_average,
        adjustment_applied=comparison.adjustment_applied,
        category=comparison.category,
    )
