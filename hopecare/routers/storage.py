"""Storage API: upload, resolve, list and delete media files."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from hopecare.config import SIGNED_URL_EXPIRES_IN
from hopecare.core.errors import (
    ConfigError,
    ErrorType,
    InvalidDataUrlError,
    StorageNotFoundError,
    error_message,
    handle_config_error,
    handle_error,
    handle_storage_error,
)
from hopecare.core.upload_validation import validate_upload
from hopecare.schemas.storage import (
    CheckResponse,
    DataUrlUploadRequest,
    FileListResponse,
    ProviderResponse,
    SelfCheckResponse,
    UploadResponse,
    UrlResponse,
)
from hopecare.storage import ProviderSelection, StorageBackend, get_selection, get_storage
from hopecare.storage.diagnostics import CheckResult, run_all_checks
from hopecare.storage.paths import generate_file_path

router = APIRouter(prefix="/storage", tags=["storage"])

Storage = Annotated[StorageBackend, Depends(get_storage)]


def _raise_for_error(error: Any, context: str) -> None:
    """Translate a result-envelope error into an HTTP error."""
    if error is None:
        return
    if isinstance(error, StorageNotFoundError):
        detail = handle_storage_error(error, context=context, user_message=error.message)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    if isinstance(error, InvalidDataUrlError):
        detail = handle_error(error, error_type=ErrorType.VALIDATION, context=context)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
    if isinstance(error, ConfigError):
        detail = handle_config_error(error, context=context)
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
    detail = handle_storage_error(error, context=context)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


def _check_response(result: CheckResult) -> CheckResponse:
    return CheckResponse(success=result.success, message=result.message, url=result.url, files=result.files)


@router.get("/provider", response_model=ProviderResponse)
async def get_provider(
    backend: Storage,
    selection: Annotated[ProviderSelection, Depends(get_selection)],
) -> ProviderResponse:
    """Which backend this process is bound to, and why if it fell back."""
    reason = error_message(selection.reason) if selection.fell_back else None
    return ProviderResponse(provider=backend.provider_name, fellBack=selection.fell_back, reason=reason)


@router.post("/uploads", response_model=UploadResponse, status_code=201)
async def upload_media(
    backend: Storage,
    file: UploadFile = File(...),
    directory: str = Form("uploads"),
) -> UploadResponse:
    """
    Upload one media file under directory; the stored name is made unique.
    Allowed: images, documents (PDF/DOC/DOCX), videos, text.
    """
    if not file.filename:
        raise HTTPException(status_code=400, detail="Filename is required")
    content = await file.read()
    file_type, err = validate_upload(file.filename, file.content_type, len(content))
    if err or file_type is None:
        raise HTTPException(status_code=400, detail=err or "Unsupported file type")
    await file.seek(0)
    path = generate_file_path(directory, file.filename)
    metadata = {"content_type": file.content_type} if file.content_type else None
    result = await backend.upload_file(path, file.file, metadata)
    _raise_for_error(result.error, "storage.upload")
    return UploadResponse(path=path, url=result.url)


@router.post("/data-url", response_model=UploadResponse, status_code=201)
async def upload_data_url(body: DataUrlUploadRequest, backend: Storage) -> UploadResponse:
    metadata = {"content_type": body.contentType} if body.contentType else None
    result = await backend.upload_data_url(body.path, body.dataUrl, metadata)
    _raise_for_error(result.error, "storage.data_url")
    return UploadResponse(path=body.path, url=result.url)


@router.get("/url", response_model=UrlResponse)
async def get_file_url(backend: Storage, path: str = Query(..., min_length=1)) -> UrlResponse:
    result = await backend.get_file_url(path)
    _raise_for_error(result.error, "storage.url")
    return UrlResponse(url=result.url)


@router.get("/signed-url", response_model=UrlResponse)
async def get_signed_url(
    backend: Storage,
    path: str = Query(..., min_length=1),
    expires_in: int = Query(SIGNED_URL_EXPIRES_IN, alias="expiresIn", gt=0),
) -> UrlResponse:
    result = await backend.get_signed_url(path, expires_in)
    _raise_for_error(result.error, "storage.signed_url")
    return UrlResponse(url=result.url)


@router.get("/files", response_model=FileListResponse)
async def list_files(backend: Storage, path: str = Query("")) -> FileListResponse:
    result = await backend.list_files(path)
    _raise_for_error(result.error, "storage.list")
    return FileListResponse(files=result.files)


@router.delete("/files", status_code=204)
async def delete_file(backend: Storage, path: str = Query(..., min_length=1)) -> None:
    result = await backend.delete_file(path)
    _raise_for_error(result.error, "storage.delete")


@router.post("/self-check", response_model=SelfCheckResponse)
async def self_check(backend: Storage) -> SelfCheckResponse:
    """Upload, list and delete a small test file against the active backend."""
    report = await run_all_checks(backend)
    return SelfCheckResponse(
        provider=report.provider,
        success=report.success,
        uploadTest=_check_response(report.upload),
        listTest=_check_response(report.listing),
        deleteTest=_check_response(report.delete) if report.delete else None,
    )
