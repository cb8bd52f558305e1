"""
app/schemas package marker.
"""

from app.schemas.comparison import (
    CitiesResponse,
    ComparisonResponse,
    HousingCategoryResponse,
    RentalDataResponse,
)
from app.schemas.snapshot import RentalRecordPayload, SnapshotDocument, SnapshotMetadataPayload

__all__ = [
    "CitiesResponse",
    "ComparisonResponse",
    "HousingCategoryResponse",
    "RentalDataResponse",
    "RentalRecordPayload",
    "SnapshotDocument",
    "SnapshotMetadataPayload",
]
