import datetime as dt
from dataclasses import dataclass


@dataclass
class FileRecord:
    storage_name: str
    original_name: str
    size_bytes: int
    content_type: str
    storage_path: str
    uploaded_at: dt.datetime
    last_modified_at: dt.datetime
    # assigned by the repository on insert
    id: int | None = None
