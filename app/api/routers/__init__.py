"""
app/api/routers package marker.
"""

from app.api.routers.comparison import router as comparison_router
from app.api.routers.rental_data import router as rental_data_router

__all__ = [
    "comparison_router",
    "rental_data_router",
]
