"""Upload / list / download / delete orchestration.

Upload writes the blob first, then the metadata row. Delete removes the blob
first, then the row. Neither path repairs the other half after a failure:
a crash or metadata error can leave an orphan blob (upload) and a failed
blob removal leaves the row in place (delete). Orphans are logged, never
patched up here.
"""
from __future__ import annotations

import datetime as dt
import io
import logging
import os
from collections.abc import Callable, Collection
from typing import BinaryIO

from .config import DEFAULT_ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES
from .errors import IOFailure, NotFoundError
from .naming import generate_storage_name
from .records import FileRecord
from .repository import FileRepository
from .storage import BlobStore
from .validation import validate_upload

DEFAULT_CONTENT_TYPE = "application/octet-stream"

logger = logging.getLogger(__name__)


def utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _content_length(stream: BinaryIO) -> int:
    """Bytes left in a seekable stream, position untouched."""
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    end = stream.tell()
    stream.seek(pos)
    return end - pos


class FileService:
    def __init__(
        self,
        blob_store: BlobStore,
        repository: FileRepository,
        *,
        allowed_extensions: Collection[str] = DEFAULT_ALLOWED_EXTENSIONS,
        max_bytes: int = MAX_UPLOAD_BYTES,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
        clock: Callable[[], dt.datetime] = utcnow,
    ):
        self.blob_store = blob_store
        self.repository = repository
        self.allowed_extensions = allowed_extensions
        self.max_bytes = max_bytes
        self.default_content_type = default_content_type
        self.clock = clock

    def upload(
        self,
        data: bytes | BinaryIO,
        filename: str | None,
        content_type: str | None = None,
        size: int | None = None,
    ) -> FileRecord:
        stream = io.BytesIO(data) if isinstance(data, (bytes, bytearray)) else data
        content_length = _content_length(stream)
        declared_size = content_length if size is None else size

        validate_upload(
            content_length,
            filename,
            declared_size,
            allowed_extensions=self.allowed_extensions,
            max_bytes=self.max_bytes,
        )

        storage_name = generate_storage_name(filename)
        stored_size = self.blob_store.write(storage_name, stream, max_bytes=self.max_bytes)

        now = self.clock()
        record = FileRecord(
            storage_name=storage_name,
            original_name=filename,
            size_bytes=stored_size,
            content_type=content_type or self.default_content_type,
            storage_path=str(self.blob_store.path_for(storage_name)),
            uploaded_at=now,
            last_modified_at=now,
        )
        try:
            saved = self.repository.insert(record)
        except Exception:
            logger.error("Metadata insert failed, orphaned blob left on disk: %s", storage_name)
            raise

        logger.info(
            "Uploaded %s as %s (id=%s, %d bytes)",
            filename,
            saved.storage_name,
            saved.id,
            saved.size_bytes,
        )
        return saved

    def list_files(self) -> list[FileRecord]:
        return self.repository.find_all()

    def get(self, storage_name: str) -> FileRecord:
        record = self.repository.find_by_storage_name(storage_name)
        if record is None:
            raise NotFoundError(f"File not found: {storage_name}")
        return record

    def download(self, storage_name: str) -> tuple[BinaryIO, str]:
        record = self.get(storage_name)
        try:
            content = self.blob_store.read(record.storage_name)
        except NotFoundError:
            logger.warning("Metadata exists but blob is missing: %s", storage_name)
            raise
        return content, record.original_name

    def delete(self, storage_name: str) -> None:
        record = self.get(storage_name)
        try:
            self.blob_store.delete(record.storage_name)
        except IOFailure:
            logger.error("Blob removal failed, keeping metadata for %s", storage_name)
            raise
        self.repository.delete(record)
        logger.info("Deleted %s (id=%s)", storage_name, record.id)
