"""Self-check of the active storage backend: upload, resolve, list, delete."""

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from hopecare.core.errors import error_message
from hopecare.storage.base import StorageBackend

logger = logging.getLogger(__name__)

CHECK_DIRECTORY = "test"


@dataclass
class CheckResult:
    success: bool
    message: str
    url: str | None = None
    files: list[str] | None = None
    path: str | None = None


@dataclass
class StorageCheckReport:
    provider: str
    upload: CheckResult
    listing: CheckResult
    delete: CheckResult | None = None

    @property
    def success(self) -> bool:
        checks = [self.upload, self.listing] + ([self.delete] if self.delete else [])
        return all(c.success for c in checks)


async def check_file_upload(backend: StorageBackend, directory: str = CHECK_DIRECTORY) -> CheckResult:
    """Upload a small text file, then resolve its URL."""
    content = f"This is a test file created at {datetime.now(timezone.utc).isoformat()}"
    path = f"{directory}/test-{int(time.time() * 1000)}.txt"
    logger.info("Checking upload to path: %s", path)

    upload = await backend.upload_buffer(path, content.encode("utf-8"), {"content_type": "text/plain"})
    if upload.error:
        return CheckResult(False, f"Upload failed: {error_message(upload.error)}", path=path)

    resolved = await backend.get_file_url(path)
    if resolved.error:
        return CheckResult(False, f"Getting URL failed: {error_message(resolved.error)}", path=path)

    return CheckResult(True, "File upload and URL retrieval successful", url=resolved.url, path=path)


async def check_list_files(backend: StorageBackend, path: str = f"{CHECK_DIRECTORY}/") -> CheckResult:
    logger.info("Checking listing files in path: %s", path)
    result = await backend.list_files(path)
    if result.error:
        return CheckResult(False, f"Listing files failed: {error_message(result.error)}")
    return CheckResult(True, f"Found {len(result.files)} files in the test directory", files=result.files)


async def check_delete_file(backend: StorageBackend, path: str) -> CheckResult:
    logger.info("Checking deleting file at path: %s", path)
    result = await backend.delete_file(path)
    if result.error or not result.success:
        return CheckResult(False, f"Deleting file failed: {error_message(result.error)}", path=path)
    return CheckResult(True, "File deletion successful", path=path)


async def run_all_checks(backend: StorageBackend) -> StorageCheckReport:
    """Run upload, list and (when the upload worked) delete against backend."""
    upload = await check_file_upload(backend)
    logger.info("Upload check: %s", upload.message)

    listing = await check_list_files(backend)
    logger.info("List check: %s", listing.message)

    delete = None
    if upload.success and upload.path:
        delete = await check_delete_file(backend, upload.path)
        logger.info("Delete check: %s", delete.message)

    return StorageCheckReport(
        provider=backend.provider_name,
        upload=upload,
        listing=listing,
        delete=delete,
    )
