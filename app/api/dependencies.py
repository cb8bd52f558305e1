"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from fastapi import HTTPException, Query, status


@dataclass(frozen=True)
class ComparisonQuery:
    city: str
    beds: str
    price: float
    category: str | None = None


def get_comparison_query(
    city: str = Query(..., description="City name, e.g. Toronto"),
    beds: str = Query(..., description="Bedroom count: 0, 1, 2 or 3+"),
    price: float = Query(..., description="Monthly rent to compare"),
    category: str | None = Query(default=None, description="Optional housing category"),
) -> ComparisonQuery:
    """
    Validate comparison parameters beyond what the query types enforce.
    """

    city = city.strip()
    beds = beds.strip()
    if not city or not beds:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required parameters: city, beds, price",
        )
    if not math.isfinite(price) or price <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price must be a positive number",
        )

    return ComparisonQuery(
        city=city,
        beds=beds,
        price=price,
        category=(category or "").strip() or None,
    )
