"""
app/api/routers package marker.
"""

from app.api.routers.comparison import router as comparison_router
from app.api.routers.hotels import router as hotels_router
from app.api.routers.ingestion import router as ingestion_router

__all__ = [
    "comparison_router",
    "hotels_router",
    "ingestion_router",
]
