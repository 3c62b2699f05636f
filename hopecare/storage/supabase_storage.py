"""Supabase Storage backend."""

import asyncio
import io
import logging
from typing import Any, BinaryIO, NamedTuple

from supabase import create_client

from hopecare.config import (
    SIGNED_URL_EXPIRES_IN,
    STORAGE_CACHE_CONTROL,
    STORAGE_LIST_CONCURRENCY,
    STORAGE_LIST_LIMIT,
    SUPABASE_ANON_KEY,
    SUPABASE_DEFAULT_BUCKET,
    SUPABASE_SERVICE_ROLE_KEY,
    SUPABASE_URL,
)
from hopecare.core.errors import ConfigError, InvalidDataUrlError, StorageError, StorageNotFoundError
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

# Metadata keys translated into Supabase file options; the rest pass through as-is
KNOWN_METADATA_KEYS = ("content_type", "cache_control", "custom_metadata")
FOLDER_PLACEHOLDER = ".emptyFolderPlaceholder"


class ParsedPath(NamedTuple):
    bucket: str
    filename: str


class SupabaseStorage(StorageBackend):
    """
    Store files in Supabase Storage buckets. Returns public URLs.

    The first path segment names the bucket and the rest is the object key,
    so "avatars/users/42.png" is key "users/42.png" in bucket "avatars".
    """

    provider_name = "supabase"

    def __init__(self, client: Any = None, default_bucket: str | None = None) -> None:
        if client is None:
            key = SUPABASE_SERVICE_ROLE_KEY or SUPABASE_ANON_KEY
            if not SUPABASE_URL or not key:
                raise ConfigError(
                    "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) "
                    "must be set when USE_SUPABASE_STORAGE=true"
                )
            client = create_client(SUPABASE_URL, key)
        self.client = client
        self.default_bucket = default_bucket or SUPABASE_DEFAULT_BUCKET

    def parse_path(self, path: str) -> ParsedPath:
        """Split path on its first "/" into bucket and in-bucket key."""
        bucket, sep, filename = path.partition("/")
        if not sep:
            return ParsedPath(self.default_bucket, path)
        return ParsedPath(bucket, filename)

    def _bucket(self, bucket: str):
        return self.client.storage.from_(bucket)

    def _file_options(self, content_type: str, metadata: dict[str, Any] | None) -> dict[str, str]:
        metadata = metadata or {}
        options = {
            "cache-control": str(metadata.get("cache_control") or STORAGE_CACHE_CONTROL),
            "upsert": "true",
            "content-type": content_type,
        }
        for key, value in metadata.items():
            if key not in KNOWN_METADATA_KEYS:
                options[key] = value if isinstance(value, str) else str(value)
        return options

    def _public_url(self, bucket: str, filename: str) -> str:
        url = self._bucket(bucket).get_public_url(filename)
        if not url:
            raise StorageError(f"Could not resolve public URL for {bucket}/{filename}")
        return url.rstrip("?")

    def _put_bytes(self, path: str, data: bytes, content_type: str, metadata: dict[str, Any] | None) -> str:
        bucket, filename = self.parse_path(path)
        self._bucket(bucket).upload(filename, data, self._file_options(content_type, metadata))
        logger.debug("Uploaded %d bytes to Supabase Storage: %s/%s", len(data), bucket, filename)
        return self._public_url(bucket, filename)

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
            logger.error("Error uploading file to Supabase Storage: %s", e)
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
            logger.error("Error uploading buffer to Supabase Storage: %s", e)
            return UrlResult(error=e)

    async def upload_data_url(
        self,
        path: str,
        data_url: str,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        try:
            content, content_type = parse_data_url(data_url)
        except InvalidDataUrlError as e:
            logger.error("Error uploading data URL to Supabase Storage: %s", e)
            return UrlResult(error=e)
        file = io.BytesIO(content)
        file.name = path.rsplit("/", 1)[-1] or "file"
        file.content_type = content_type
        return await self.upload_file(path, file, metadata)

    async def get_file_url(self, path: str) -> UrlResult:
        try:
            bucket, filename = self.parse_path(path)
            url = await asyncio.to_thread(self._public_url, bucket, filename)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error getting file URL from Supabase Storage: %s", e)
            return UrlResult(error=e)

    def _signed_url(self, path: str, expires_in: int) -> str:
        bucket, filename = self.parse_path(path)
        response = self._bucket(bucket).create_signed_url(filename, expires_in)
        signed = (response or {}).get("signedURL") or (response or {}).get("signedUrl")
        if not signed:
            raise StorageError(f"Failed to sign URL for {path}", code="sign-url-failed")
        return signed

    async def get_signed_url(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_IN) -> UrlResult:
        try:
            url = await asyncio.to_thread(self._signed_url, path, expires_in)
            return UrlResult(url=url)
        except Exception as e:
            logger.error("Error getting signed URL from Supabase Storage: %s", e)
            return UrlResult(error=e)

    def _delete(self, path: str) -> None:
        bucket, filename = self.parse_path(path)
        removed = self._bucket(bucket).remove([filename])
        # Supabase reports a missing object as an empty removal list, not an error
        if not removed:
            raise StorageNotFoundError(path)

    async def delete_file(self, path: str) -> DeleteResult:
        try:
            await asyncio.to_thread(self._delete, path)
            logger.debug("Deleted Supabase Storage object: %s", path)
            return DeleteResult(success=True)
        except Exception as e:
            logger.error("Error deleting file from Supabase Storage: %s", e)
            return DeleteResult(success=False, error=e)

    def _list_keys(self, bucket: str, prefix: str) -> list[str]:
        entries = self._bucket(bucket).list(
            prefix,
            {
                "limit": STORAGE_LIST_LIMIT,
                "offset": 0,
                "sortBy": {"column": "name", "order": "asc"},
            },
        )
        keys = []
        for entry in entries or []:
            name = entry.get("name")
            # Folders come back with a null id
            if not name or entry.get("id") is None or name == FOLDER_PLACEHOLDER:
                continue
            keys.append(f"{prefix}/{name}" if prefix else name)
        return keys

    async def list_files(self, path: str) -> ListResult:
        try:
            bucket, filename = self.parse_path(path)
            prefix = filename.strip("/")
            keys = await asyncio.to_thread(self._list_keys, bucket, prefix)
            urls = await gather_bounded(
                [lambda key=key: asyncio.to_thread(self._public_url, bucket, key) for key in keys],
                STORAGE_LIST_CONCURRENCY,
            )
            return ListResult(files=urls)
        except Exception as e:
            logger.error("Error listing files from Supabase Storage: %s", e)
            return ListResult(error=e)
