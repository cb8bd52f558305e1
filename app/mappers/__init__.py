"""
app/mappers package marker.
"""

from app.mappers.field_identifier import FIELD_RULES, identify_fields, match_columns

__all__ = [
    "FIELD_RULES",
    "identify_fields",
    "match_columns",
]
