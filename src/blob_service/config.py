from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_EXTENSIONS = frozenset(
    {
        "txt", "jpg", "jpeg", "png", "gif", "pdf",
        "doc", "docx", "xls", "xlsx", "ppt", "pptx",
        "json", "xml", "csv", "zip", "rar",
    }
)

MAX_UPLOAD_BYTES = 100 * 1024 * 1024  # 100 MiB


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BLOB_", env_file=None, extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8001
    data_dir: str = "/data"
    files_dir: str = "/data/files"
    database_url: str | None = None

    max_upload_bytes: int = MAX_UPLOAD_BYTES
    allowed_extensions: frozenset[str] = Field(default=DEFAULT_ALLOWED_EXTENSIONS)
    default_content_type: str = "application/octet-stream"

    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @property
    def db_url(self) -> str:
        if self.database_url:
            return self.database_url
        # sqlite file next to the blobs
        return f"sqlite:///{self.data_dir.rstrip('/')}/blob_service.db"


settings = Settings()
