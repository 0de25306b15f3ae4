import datetime as dt
from pydantic import BaseModel, ConfigDict


class FileMeta(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    storage_name: str
    original_name: str
    size_bytes: int
    content_type: str
    uploaded_at: dt.datetime
    last_modified_at: dt.datetime


class ErrorDetail(BaseModel):
    kind: str
    detail: str
    reason: str | None = None
