"""Pydantic schemas for the Storage API."""

from pydantic import BaseModel, Field


class ProviderResponse(BaseModel):
    provider: str
    fellBack: bool
    reason: str | None = None


class DataUrlUploadRequest(BaseModel):
    """Upload body for a base64 data URL (e.g. a cropped image from the editor)."""

    path: str = Field(..., min_length=1)
    dataUrl: str = Field(..., min_length=5)
    contentType: str | None = None


class UploadResponse(BaseModel):
    path: str
    url: str


class UrlResponse(BaseModel):
    url: str


class FileListResponse(BaseModel):
    files: list[str]


class CheckResponse(BaseModel):
    success: bool
    message: str
    url: str | None = None
    files: list[str] | None = None


class SelfCheckResponse(BaseModel):
    provider: str
    success: bool
    uploadTest: CheckResponse
    listTest: CheckResponse
    deleteTest: CheckResponse | None = None
