"""Firebase Storage backend."""

import asyncio
import logging
import threading
import uuid
from typing import Any, BinaryIO
from urllib.parse import quote

import firebase_admin
from firebase_admin import credentials
from firebase_admin import storage as firebase_storage
from google.api_core.exceptions import NotFound

from hopecare.config import (
    FIREBASE_CREDENTIALS_PATH,
    FIREBASE_STORAGE_BUCKET,
    SIGNED_URL_EXPIRES_IN,
    STORAGE_LIST_CONCURRENCY,
)
from hopecare.core.errors import ConfigError, StorageError, StorageNotFoundError
from hopecare.storage.base import (
    Buffer,
    StorageBackend,
    gather_bounded,
    guess_content_type,
    parse_data_url,
    read_file_bytes,
)
from hopecare.storage.results import DeleteResult, ListResult, UrlResult

logger = logging.getLogger(__name__)

DOWNLOAD_HOST = "https://firebasestorage.googleapis.com"
TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"


class FirebaseStorage(StorageBackend):
    """
    Store files in the Firebase Storage bucket of the default Firebase app.

    Paths are opaque hierarchical keys. Download URLs embed an access token,
    so get_signed_url returns the same URL as get_file_url and does not
    enforce any expiry.
    """

    provider_name = "firebase"

    def __init__(self, bucket: Any = None, bucket_name: str | None = None) -> None:
        # bucket is a google.cloud.storage.Bucket; created on first use if not given
        self._bucket = bucket
        self.bucket_name = bucket_name if bucket_name is not None else FIREBASE_STORAGE_BUCKET
        self._lock = threading.Lock()

    def _get_bucket(self):
        if self._bucket is None:
            with self._lock:
                if self._bucket is None:
                    try:
                        app = firebase_admin.get_app()
                    except ValueError:
                        app = None
                    try:
                        if app is None:
                            cred = (
                                credentials.Certificate(FIREBASE_CREDENTIALS_PATH)
                                if FIREBASE_CREDENTIALS_PATH
                                else None
                            )
                            options = {"storageBucket": self.bucket_name} if self.bucket_name else None
                            app = firebase_admin.initialize_app(cred, options)
                        self._bucket = firebase_storage.bucket(self.bucket_name or None, app=app)
                    except (ValueError, OSError) as e:
                        raise ConfigError(f"Firebase Storage is not configured: {e}") from e
                    logger.info("Initialized Firebase storage for bucket: %s", self._bucket.name)
        return self._bucket

    def _download_url(self, blob) -> str:
        tokens = (blob.metadata or {}).get(TOKEN_METADATA_KEY)
        if not tokens:
            raise StorageError(f"No download URL for object: {blob.name}", code="no-download-url")
        token = tokens.split(",")[0]
        bucket_name = self._get_bucket().name
        return f"{DOWNLOAD_HOST}/v0/b/{bucket_name}/o/{quote(blob.name, safe='')}?alt=media&token={token}"

    def _resolve_url(self, path: str) -> str:
        blob = self._get_bucket().get_blob(path)
        if blob is None:
            raise StorageNotFoundError(path)
        return self._download_url(blob)

    def _new_blob(self, path: str, content_type: str, metadata: dict[str, Any] | None):
        blob = self._get_bucket().blob(path)
        metadata = metadata or {}
        custom = {str(k): str(v) for k, v in (metadata.get("custom_metadata") or {}).items()}
        custom[TOKEN_METADATA_KEY] = str(uuid.uuid4())
        blob.metadata = custom
        blob.content_type = content_type
        if metadata.get("cache_control"):
            blob.cache_control = metadata["cache_control"]
        return blob

    def _put_bytes(self, path: str, data: bytes, content_type: str, metadata: dict[str, Any] | None) -> str:
        blob = self._new_blob(path, content_type, metadata)
        blob.upload_from_string(data, content_type=content_type)
        logger.debug("Uploaded %d bytes to Firebase Storage: %s", len(data), path)
        return self._resolve_url(path)

    def _put_data_url(self, path: str, data_url: str, metadata: dict[str, Any] | None) -> str:
        content, data_type = parse_data_url(data_url)
        content_type = (metadata or {}).get("content_type") or data_type
        return self._put_bytes(path, content, content_type, metadata)

    async def upload_file(
        self,
        path: str,
        file: BinaryIO,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        try:
            content_type = guess_content_type(path, metadata, file)
            data = await asyncio.to_thread(read_file_bytes, file)
            url = await asyncio.to_thread(self._put_bytes, path, data, content_type, metadata)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error uploading file to Firebase Storage: %s", e)
            return UrlResult(error=e)

    async def upload_buffer(
        self,
        path: str,
        buffer: Buffer,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        try:
            content_type = guess_content_type(path, metadata)
            url = await asyncio.to_thread(self._put_bytes, path, bytes(buffer), content_type, metadata)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error uploading buffer to Firebase Storage: %s", e)
            return UrlResult(error=e)

    async def upload_data_url(
        self,
        path: str,
        data_url: str,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        try:
            url = await asyncio.to_thread(self._put_data_url, path, data_url, metadata)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error uploading data URL to Firebase Storage: %s", e)
            return UrlResult(error=e)

    async def get_file_url(self, path: str) -> UrlResult:
        try:
            url = await asyncio.to_thread(self._resolve_url, path)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error getting file URL from Firebase Storage: %s", e)
            return UrlResult(error=e)

    async def get_signed_url(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_IN) -> UrlResult:
        # Download URLs already carry an access token; expires_in is ignored.
        return await self.get_file_url(path)

    def _delete(self, path: str) -> None:
        try:
            self._get_bucket().blob(path).delete()
        except NotFound as e:
            raise StorageNotFoundError(path) from e

    async def delete_file(self, path: str) -> DeleteResult:
        try:
            await asyncio.to_thread(self._delete, path)
            logger.debug("Deleted Firebase Storage object: %s", path)
            return DeleteResult(success=True)
        except Exception as e:
            logger.error("Error deleting file from Firebase Storage: %s", e)
            return DeleteResult(success=False, error=e)

    def _list_children(self, path: str) -> list:
        prefix = path.strip("/")
        prefix = f"{prefix}/" if prefix else ""
        # delimiter keeps only direct children; sub-directories land in prefixes
        return list(self._get_bucket().list_blobs(prefix=prefix, delimiter="/"))

    async def list_files(self, path: str) -> ListResult:
        try:
            blobs = await asyncio.to_thread(self._list_children, path)
            urls = await gather_bounded(
                [lambda name=blob.name: asyncio.to_thread(self._resolve_url, name) for blob in blobs],
                STORAGE_LIST_CONCURRENCY,
            )
            return ListResult(files=urls)
        except Exception as e:
            logger.error("Error listing files from Firebase Storage: %s", e)
            return ListResult(error=e)
