import datetime as dt
from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from .db import Base


class StoredFile(Base):
    __tablename__ = "stored_files"
    # ids are never handed out twice, even after deletes
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    storage_name: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
    original_name: Mapped[str] = mapped_column(String, nullable=False)
    content_type: Mapped[str] = mapped_column(String, nullable=False, default="application/octet-stream")
    size_bytes: Mapped[int] = mapped_column(BigInteger, nullable=False)
    storage_path: Mapped[str] = mapped_column(String, nullable=False)
    uploaded_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    last_modified_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
