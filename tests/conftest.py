"""Shared fixtures for blob service tests."""

import datetime as dt
import itertools

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from blob_service.db import init_db, make_engine
from blob_service.repository import InMemoryFileRepository, SqlFileRepository
from blob_service.service import FileService
from blob_service.storage import BlobStore


@pytest.fixture
def blob_store(tmp_path):
    """Blob store rooted in a fresh temporary directory."""
    store = BlobStore(tmp_path / "files")
    store.ensure_root()
    return store


@pytest.fixture
def repository():
    return InMemoryFileRepository()


@pytest.fixture
def sql_repository():
    """SQL repository over an in-memory SQLite database."""
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield SqlFileRepository(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def clock():
    """Deterministic clock, one second per call."""
    start = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
    ticks = itertools.count()
    return lambda: start + dt.timedelta(seconds=next(ticks))


@pytest.fixture
def service(blob_store, repository, clock):
    return FileService(blob_store, repository, clock=clock)
