"""
app/services package marker.
"""

from app.services.bulk_upload_service import BulkUploadService, get_bulk_upload_service
from app.services.rate_limiter import FixedWindowRateLimiter, RateLimitDecision

__all__ = [
    "BulkUploadService",
    "FixedWindowRateLimiter",
    "RateLimitDecision",
    "get_bulk_upload_service",
]
