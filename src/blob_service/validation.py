from __future__ import annotations

from collections.abc import Collection

from .config import DEFAULT_ALLOWED_EXTENSIONS, MAX_UPLOAD_BYTES
from .errors import ValidationFailure, ValidationReason


def file_extension(filename: str | None) -> str:
    """Lowercase text after the last dot, '' when there is none."""
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[1].lower()


def validate_upload(
    content_length: int,
    filename: str | None,
    declared_size: int,
    *,
    allowed_extensions: Collection[str] = DEFAULT_ALLOWED_EXTENSIONS,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> None:
    # order matters: empty -> name -> type -> size
    if content_length == 0:
        raise ValidationFailure(ValidationReason.EMPTY_FILE, "File cannot be empty")

    if filename is None or not filename.strip():
        raise ValidationFailure(ValidationReason.MISSING_NAME, "File name cannot be empty")

    ext = file_extension(filename)
    if ext not in allowed_extensions:
        raise ValidationFailure(
            ValidationReason.UNSUPPORTED_TYPE,
            f"File type '{ext}' is not supported",
        )

    if declared_size > max_bytes:
        raise ValidationFailure(
            ValidationReason.TOO_LARGE,
            f"File size {declared_size} exceeds limit of {max_bytes} bytes",
        )
