"""
app/validators/upload_validator.py

Pre-stream checks for uploaded CSV files.
"""

from __future__ import annotations

import os
from collections.abc import Sequence

from fastapi import UploadFile

from app.services.errors import MissingFileError, PayloadTooLargeError, UnsupportedMediaTypeError


class UploadValidator:
    """
    Rejects uploads that are missing, oversized, or not CSV.
    """

    def __init__(self, *, max_file_size_bytes: int, allowed_mime_types: Sequence[str]) -> None:
        self._max_file_size_bytes = max_file_size_bytes
        self._allowed_mime_types = tuple(mime.strip().lower() for mime in allowed_mime_types)

    @property
    def allowed_mime_types(self) -> tuple[str, ...]:
        return self._allowed_mime_types

    def validate(self, upload_file: UploadFile | None) -> UploadFile:
        """
        Run presence, size, and type checks in that order.
        """

        if upload_file is None:
            raise MissingFileError()

        if self.resolve_size(upload_file) > self._max_file_size_bytes:
            raise PayloadTooLargeError(self._max_file_size_bytes)

        if not self.is_csv(upload_file):
            raise UnsupportedMediaTypeError(self._allowed_mime_types)

        return upload_file

    def is_csv(self, upload_file: UploadFile) -> bool:
        """
        Either an allowed media type or a ``.csv`` filename is enough.
        """

        filename = (upload_file.filename or "").strip().lower()
        content_type = (upload_file.content_type or "").split(";", 1)[0].strip().lower()

        is_csv_filename = filename.endswith(".csv")
        is_csv_content_type = content_type in self._allowed_mime_types
        return is_csv_filename or is_csv_content_type

    @staticmethod
    def resolve_size(upload_file: UploadFile) -> int:
        """
        Declared size when the transport supplied one, else measured by seeking.
        """

        if upload_file.size is not None:
            return upload_file.size

        raw_file = upload_file.file
        position = raw_file.tell()
        raw_file.seek(0, os.SEEK_END)
        size = raw_file.tell()
        raw_file.seek(position)
        return size
