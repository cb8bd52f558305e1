"""
app/services package marker.
"""

from app.services.comparison_service import RentComparison, build_comparison
from app.services.dataset_acquirer import DatasetAcquirer, DatasetCache, get_dataset_acquirer
from app.services.lookup_engine import RentLookupEngine, get_rent_lookup_engine
from app.services.refresh_service import RefreshService, get_refresh_service

__all__ = [
    "DatasetAcquirer",
    "DatasetCache",
    "get_dataset_acquirer",
    "RentComparison",
    "build_comparison",
    "RentLookupEngine",
    "get_rent_lookup_engine",
    "RefreshService",
    "get_refresh_service",
]
