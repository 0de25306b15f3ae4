from typing import BinaryIO
from urllib.parse import quote

from fastapi import Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .config import settings
from .db import SessionLocal, init_db
from .errors import BlobServiceError, ErrorKind, ValidationFailure
from .logging_config import configure_logging
from .repository import SqlFileRepository
from .schemas import ErrorDetail, FileMeta
from .service import FileService
from .storage import CHUNK_SIZE, BlobStore

app = FastAPI(title="Blob Storage Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.IO: 500,
}


def get_file_service() -> FileService:
    return FileService(
        BlobStore(settings.files_dir),
        SqlFileRepository(SessionLocal),
        allowed_extensions=settings.allowed_extensions,
        max_bytes=settings.max_upload_bytes,
        default_content_type=settings.default_content_type,
    )


@app.on_event("startup")
def _startup():
    configure_logging(settings.log_level)
    # a missing blob root is fatal: StorageInitError aborts startup
    BlobStore(settings.files_dir).ensure_root()
    init_db()


@app.exception_handler(BlobServiceError)
def _blob_service_error(request: Request, exc: BlobServiceError):
    reason = exc.reason.value if isinstance(exc, ValidationFailure) else None
    body = ErrorDetail(kind=exc.kind.value, detail=str(exc), reason=reason)
    return JSONResponse(status_code=STATUS_BY_KIND[exc.kind], content=body.model_dump(exclude_none=True))


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/api/files/upload", response_model=FileMeta, status_code=201)
def upload_file(file: UploadFile = File(...), service: FileService = Depends(get_file_service)):
    try:
        record = service.upload(file.file, file.filename, file.content_type, file.size)
    finally:
        file.file.close()
    return FileMeta.model_validate(record)


@app.get("/api/files", response_model=list[FileMeta])
def list_files(service: FileService = Depends(get_file_service)):
    return [FileMeta.model_validate(r) for r in service.list_files()]


def _iter_blob(fh: BinaryIO):
    with fh:
        while True:
            chunk = fh.read(CHUNK_SIZE)
            if not chunk:
                break
            yield chunk


def content_disposition(filename: str) -> str:
    return f"attachment; filename*=UTF-8''{quote(filename, safe='')}"


@app.get("/api/files/download/{storage_name}")
def download(storage_name: str, service: FileService = Depends(get_file_service)):
    content, original_name = service.download(storage_name)
    return StreamingResponse(
        _iter_blob(content),
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(original_name)},
    )


@app.delete("/api/files/{storage_name}", status_code=204)
def delete_file(storage_name: str, service: FileService = Depends(get_file_service)):
    service.delete(storage_name)
    return Response(status_code=204)
