"""
app/domain package marker.
"""

from app.domain.ontario_cities import ONTARIO_CITIES
from app.domain.rental_record import (
    HOUSING_CATEGORIES,
    AverageRentResult,
    DatasetMetadata,
    FieldMap,
    HousingCategory,
    RentalRecord,
)

__all__ = [
    "AverageRentResult",
    "DatasetMetadata",
    "FieldMap",
    "HOUSING_CATEGORIES",
    "HousingCategory",
    "ONTARIO_CITIES",
    "RentalRecord",
]
