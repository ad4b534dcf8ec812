"""
Exceptions raised by the bulk upload and rate limiting flows.
"""

from __future__ import annotations

from collections.abc import Sequence


class BulkUploadError(Exception):
    """Base exception for bulk upload failures."""


class MissingFileError(BulkUploadError):
    """Raised when the request carries no file."""

    def __init__(self) -> None:
        super().__init__("No file provided")


class PayloadTooLargeError(BulkUploadError):
    """Raised when the uploaded file exceeds the configured byte limit."""

    def __init__(self, limit_bytes: int) -> None:
        self.limit_bytes = limit_bytes
        limit_mb = limit_bytes / 1024 / 1024
        super().__init__(f"File size exceeds limit. Maximum: {limit_mb:g}MB")


class UnsupportedMediaTypeError(BulkUploadError):
    """Raised when neither the media type nor the filename indicates CSV."""

    def __init__(self, allowed_types: Sequence[str]) -> None:
        self.allowed_types = tuple(allowed_types)
        super().__init__(
            "Invalid file type. Only CSV files are allowed. "
            f"Allowed types: {', '.join(self.allowed_types)}"
        )


class TooManyRowsError(BulkUploadError):
    """Raised as soon as an upload crosses the per-upload row ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Maximum records exceeded. Limit: {limit}")


class EmptyUploadError(BulkUploadError):
    """Raised when an upload contains no data rows at all."""

    def __init__(self) -> None:
        super().__init__("No valid records found in CSV file")


class InvalidCSVError(BulkUploadError):
    """Raised when the payload cannot be decoded or parsed as CSV."""


class MalformedRowError(BulkUploadError):
    """
    Raised when a single row cannot be normalized.

    Recovered by the pipeline and reported against ``row_index``.
    """

    def __init__(self, row_index: int, message: str) -> None:
        self.row_index = row_index
        super().__init__(message)


class StorePersistenceError(RuntimeError):
    """Raised when the record store cannot be read or written."""


class RateLimitExceededError(Exception):
    """
    Raised when a client exceeds its request budget for the current window.
    """

    def __init__(
        self,
        *,
        retry_after_seconds: int,
        limit: int,
        remaining: int,
        reset_time_ms: int,
    ) -> None:
        self.retry_after_seconds = retry_after_seconds
        self.limit = limit
        self.remaining = remaining
        self.reset_time_ms = reset_time_ms
        super().__init__(f"Rate limit exceeded. Try again in {retry_after_seconds} seconds.")
