"""File validation and type detection for media-library uploads."""

from typing import Literal, NamedTuple

from hopecare.config import (
    MAX_FILE_SIZE_DOCUMENT,
    MAX_FILE_SIZE_IMAGE,
    MAX_FILE_SIZE_TEXT,
    MAX_FILE_SIZE_VIDEO,
)
from hopecare.storage.paths import get_file_extension

MediaFileType = Literal["image", "document", "video", "text"]


class MediaRule(NamedTuple):
    label: str
    mime_types: frozenset[str]
    extensions: frozenset[str]
    max_size: int


MEDIA_RULES: dict[MediaFileType, MediaRule] = {
    "image": MediaRule(
        "images (JPEG/PNG/GIF/WebP/SVG)",
        frozenset({"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"}),
        frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg"}),
        MAX_FILE_SIZE_IMAGE,
    ),
    "document": MediaRule(
        "documents (PDF/DOC/DOCX)",
        frozenset({
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        }),
        frozenset({"pdf", "doc", "docx"}),
        MAX_FILE_SIZE_DOCUMENT,
    ),
    "video": MediaRule(
        "videos (MP4/WebM/MOV)",
        frozenset({"video/mp4", "video/webm", "video/quicktime"}),
        frozenset({"mp4", "webm", "mov"}),
        MAX_FILE_SIZE_VIDEO,
    ),
    "text": MediaRule(
        "text (TXT/MD/CSV/JSON)",
        frozenset({"text/plain", "text/markdown", "text/csv", "application/json"}),
        frozenset({"txt", "md", "csv", "json"}),
        MAX_FILE_SIZE_TEXT,
    ),
}


def detect_file_type(filename: str, content_type: str | None) -> MediaFileType | None:
    """Media type from the declared MIME type, else from the filename extension."""
    mime = (content_type or "").split(";")[0].strip().lower()
    ext = get_file_extension(filename)
    for attr, key in (("mime_types", mime), ("extensions", ext)):
        if not key:
            continue
        for file_type, rule in MEDIA_RULES.items():
            if key in getattr(rule, attr):
                return file_type
    return None


def get_max_size(file_type: MediaFileType) -> int:
    return MEDIA_RULES[file_type].max_size


def validate_upload(
    filename: str,
    content_type: str | None,
    size: int,
) -> tuple[MediaFileType | None, str | None]:
    """Return (file_type, error_message); error_message is None for an acceptable upload."""
    file_type = detect_file_type(filename, content_type)
    if file_type is None:
        allowed = ", ".join(rule.label for rule in MEDIA_RULES.values())
        return None, f"Unsupported file type. Allowed: {allowed}."
    max_size = get_max_size(file_type)
    if size > max_size:
        return file_type, f"File too large. {file_type.capitalize()} files are limited to {max_size // (1024 * 1024)} MB"
    return file_type, None
