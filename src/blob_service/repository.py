"""Metadata repositories.

Anything with ``insert / find_all / find_by_storage_name / delete`` can back
the file service. ``SqlFileRepository`` is used by the app,
``InMemoryFileRepository`` by tests.
"""
from __future__ import annotations

import datetime as dt
import itertools
import logging
import threading
from dataclasses import replace
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import IOFailure
from .models import StoredFile
from .records import FileRecord

logger = logging.getLogger(__name__)


class FileRepository(Protocol):
    def insert(self, record: FileRecord) -> FileRecord: ...

    def find_all(self) -> list[FileRecord]: ...

    def find_by_storage_name(self, storage_name: str) -> FileRecord | None: ...

    def delete(self, record: FileRecord) -> None: ...


class InMemoryFileRepository:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self._by_name: dict[str, FileRecord] = {}

    def insert(self, record: FileRecord) -> FileRecord:
        with self._lock:
            if record.storage_name in self._by_name:
                raise IOFailure(f"Duplicate storage name: {record.storage_name}")
            saved = replace(record, id=next(self._ids))
            self._by_name[saved.storage_name] = saved
        return replace(saved)

    def find_all(self) -> list[FileRecord]:
        with self._lock:
            rows = list(self._by_name.values())
        rows.sort(key=lambda r: (r.uploaded_at, r.id), reverse=True)
        return [replace(r) for r in rows]

    def find_by_storage_name(self, storage_name: str) -> FileRecord | None:
        with self._lock:
            rec = self._by_name.get(storage_name)
        return replace(rec) if rec else None

    def delete(self, record: FileRecord) -> None:
        with self._lock:
            self._by_name.pop(record.storage_name, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_name)


def _aware(value: dt.datetime) -> dt.datetime:
    # sqlite drops tzinfo; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value


def _to_record(row: StoredFile) -> FileRecord:
    return FileRecord(
        id=row.id,
        storage_name=row.storage_name,
        original_name=row.original_name,
        size_bytes=row.size_bytes,
        content_type=row.content_type,
        storage_path=row.storage_path,
        uploaded_at=_aware(row.uploaded_at),
        last_modified_at=_aware(row.last_modified_at),
    )


class SqlFileRepository:
    """One short-lived session per call."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def insert(self, record: FileRecord) -> FileRecord:
        row = StoredFile(
            storage_name=record.storage_name,
            original_name=record.original_name,
            content_type=record.content_type,
            size_bytes=record.size_bytes,
            storage_path=record.storage_path,
            uploaded_at=record.uploaded_at,
            last_modified_at=record.last_modified_at,
        )
        try:
            with self._session_factory() as db:
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_record(row)
        except SQLAlchemyError as e:
            logger.exception("Failed to insert metadata for %s", record.storage_name)
            raise IOFailure(f"Could not save metadata for {record.storage_name}: {e}") from e

    def find_all(self) -> list[FileRecord]:
        stmt = select(StoredFile).order_by(StoredFile.uploaded_at.desc(), StoredFile.id.desc())
        try:
            with self._session_factory() as db:
                return [_to_record(r) for r in db.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.exception("Failed to list metadata")
            raise IOFailure(f"Could not list files: {e}") from e

    def find_by_storage_name(self, storage_name: str) -> FileRecord | None:
        stmt = select(StoredFile).where(StoredFile.storage_name == storage_name)
        try:
            with self._session_factory() as db:
                row = db.execute(stmt).scalar_one_or_none()
                return _to_record(row) if row else None
        except SQLAlchemyError as e:
            logger.exception("Failed to look up %s", storage_name)
            raise IOFailure(f"Could not look up {storage_name}: {e}") from e

    def delete(self, record: FileRecord) -> None:
        try:
            with self._session_factory() as db:
                row = db.execute(
                    select(StoredFile).where(StoredFile.storage_name == record.storage_name)
                ).scalar_one_or_none()
                if row is not None:
                    db.delete(row)
                    db.commit()
        except SQLAlchemyError as e:
            logger.exception("Failed to delete metadata for %s", record.storage_name)
            raise IOFailure(f"Could not delete metadata for {record.storage_name}: {e}") from e
