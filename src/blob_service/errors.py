"""Failure kinds raised by the core.

The HTTP layer maps ``kind`` to a status code; nothing in here knows about
transport.
"""
from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    IO = "io"


class ValidationReason(str, enum.Enum):
    EMPTY_FILE = "EmptyFile"
    MISSING_NAME = "MissingName"
    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"


class BlobServiceError(Exception):
    kind: ErrorKind


class ValidationFailure(BlobServiceError):
    """Client input was rejected. Never retried."""

    kind = ErrorKind.VALIDATION

    def __init__(self, reason: ValidationReason, message: str) -> None:
        self.reason = reason
        super().__init__(message)


class NotFoundError(BlobServiceError):
    kind = ErrorKind.NOT_FOUND


class InvalidKeyError(NotFoundError):
    """Key cannot name a blob inside the store root."""


class IOFailure(BlobServiceError):
    """Storage layer fault (disk, permissions, metadata store)."""

    kind = ErrorKind.IO


class StorageInitError(RuntimeError):
    """Blob root could not be created. Fatal at startup."""
