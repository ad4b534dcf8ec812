"""
app/api/routers package marker.
"""

from app.api.routers.bulk_upload import router as bulk_upload_router

__all__ = [
    "bulk_upload_router",
]
