"""
app/normalization package marker.
"""

from app.normalization.value_normalizer import (
    BEDROOM_BUCKETS,
    STRUCTURE_CATEGORY_MAP,
    bedroom_scale,
    map_structure_type_to_category,
    normalize_bedrooms,
)

__all__ = [
    "BEDROOM_BUCKETS",
    "STRUCTURE_CATEGORY_MAP",
    "bedroom_scale",
    "map_structure_type_to_category",
    "normalize_bedrooms",
]
