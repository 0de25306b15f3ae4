"""Filesystem blob store.

Every blob lives directly under a single root directory, named by its key.
Writes go to a temporary file in the same directory and are moved into place
with ``os.replace``, so a reader never sees a half-written blob.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO

from .errors import (
    InvalidKeyError,
    IOFailure,
    NotFoundError,
    StorageInitError,
    ValidationFailure,
    ValidationReason,
)

CHUNK_SIZE = 1024 * 1024  # 1MB

logger = logging.getLogger(__name__)


class BlobStore:
    def __init__(self, root: str | Path):
        self.root = Path(root)

    def ensure_root(self) -> None:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.exception("Could not create blob root %s", self.root)
            raise StorageInitError(f"Could not create upload directory {self.root}: {e}") from e

    def path_for(self, key: str) -> Path:
        if not key or key in (".", "..") or "/" in key or "\\" in key or os.sep in key:
            raise InvalidKeyError(f"Invalid blob key: {key!r}")
        return self.root / key

    def exists(self, key: str) -> bool:
        return self.path_for(key).is_file()

    def size(self, key: str) -> int:
        path = self.path_for(key)
        try:
            return path.stat().st_size
        except FileNotFoundError:
            raise NotFoundError(f"Blob not found: {key}") from None
        except OSError as e:
            raise IOFailure(f"Could not stat blob {key}: {e}") from e

    def write(self, key: str, stream: BinaryIO, max_bytes: int | None = None) -> int:
        """Store ``stream`` under ``key`` and return the number of bytes written.

        Existing content at ``key`` is replaced atomically. When ``max_bytes`` is
        given and the stream is longer, nothing is stored and ``TOO_LARGE`` is
        raised.
        """
        destination = self.path_for(key)
        size = 0
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=".upload-", suffix=".part", dir=self.root)
            with os.fdopen(fd, "wb") as out:
                while True:
                    chunk = stream.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if max_bytes is not None and size > max_bytes:
                        raise ValidationFailure(
                            ValidationReason.TOO_LARGE,
                            f"File exceeds limit of {max_bytes} bytes",
                        )
                    out.write(chunk)
                out.flush()
                os.fsync(out.fileno())
            os.replace(tmp_name, destination)
            tmp_name = None
        except OSError as e:
            logger.exception("Failed to write blob %s", key)
            raise IOFailure(f"Could not store file {key}: {e}") from e
        finally:
            if tmp_name is not None:
                _discard(tmp_name)

        logger.info("Stored blob %s (%d bytes)", key, size)
        return size

    def read(self, key: str) -> BinaryIO:
        """Open the blob for reading. The caller closes the handle."""
        path = self.path_for(key)
        try:
            return path.open("rb")
        except FileNotFoundError:
            raise NotFoundError(f"Blob not found: {key}") from None
        except OSError as e:
            logger.exception("Failed to open blob %s", key)
            raise IOFailure(f"Could not read file {key}: {e}") from e

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug("Blob %s already absent", key)
            return
        except OSError as e:
            logger.exception("Failed to delete blob %s", key)
            raise IOFailure(f"Could not delete file {key}: {e}") from e
        logger.info("Deleted blob %s", key)


def _discard(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("Could not remove temporary file %s", path)
