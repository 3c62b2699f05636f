"""Abstract storage backend."""

import asyncio
import base64
import mimetypes
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, BinaryIO, TypeVar
from urllib.parse import unquote_to_bytes

from hopecare.config import SIGNED_URL_EXPIRES_IN
from hopecare.core.errors import InvalidDataUrlError
from hopecare.storage.results import DeleteResult, ListResult, UrlResult

T = TypeVar("T")

DEFAULT_CONTENT_TYPE = "application/octet-stream"
Buffer = bytes | bytearray | memoryview


class StorageBackend(ABC):
    """
    Interface for file storage (Firebase or Supabase).

    Every method returns a result envelope. Vendor errors are logged and
    returned in the envelope's error field instead of being raised.
    """

    provider_name: str = "storage"

    @abstractmethod
    async def upload_file(
        self,
        path: str,
        file: BinaryIO,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        """Upload a binary file-like object to path and return its URL."""
        ...

    @abstractmethod
    async def upload_buffer(
        self,
        path: str,
        buffer: Buffer,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        """Upload raw bytes to path and return its URL."""
        ...

    @abstractmethod
    async def upload_data_url(
        self,
        path: str,
        data_url: str,
        metadata: dict[str, Any] | None = None,
    ) -> UrlResult:
        """Upload a base64 (or percent-encoded) data URL to path and return its URL."""
        ...

    @abstractmethod
    async def get_file_url(self, path: str) -> UrlResult:
        """Resolve the public or download URL of an uploaded object."""
        ...

    @abstractmethod
    async def get_signed_url(self, path: str, expires_in: int = SIGNED_URL_EXPIRES_IN) -> UrlResult:
        """Resolve a time-limited URL; expires_in is in seconds."""
        ...

    @abstractmethod
    async def delete_file(self, path: str) -> DeleteResult:
        """Remove the object at path."""
        ...

    @abstractmethod
    async def list_files(self, path: str) -> ListResult:
        """List objects directly under path as resolved URLs."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} provider={self.provider_name}>"


def parse_data_url(data_url: str) -> tuple[bytes, str]:
    """
    Decode a data URL into (content, content_type).
    Raises InvalidDataUrlError if the string is not a data URL or the payload is invalid.
    """
    if not data_url or not data_url.startswith("data:"):
        raise InvalidDataUrlError("Invalid data URL: must start with 'data:'")
    header, sep, payload = data_url[5:].partition(",")
    if not sep:
        raise InvalidDataUrlError("Invalid data URL: missing ',' separator")
    params = [p.strip() for p in header.split(";")]
    is_base64 = params[-1].lower() == "base64"
    if is_base64:
        params = params[:-1]
    content_type = params[0] if params and params[0] else "text/plain"
    if is_base64:
        try:
            content = base64.b64decode(payload, validate=True)
        except (ValueError, TypeError) as e:
            raise InvalidDataUrlError(f"Invalid data URL: bad base64 payload ({e})") from e
    else:
        content = unquote_to_bytes(payload)
    return content, content_type


def guess_content_type(path: str, metadata: dict[str, Any] | None = None, file: Any = None) -> str:
    """Pick the content type from metadata, then the file object, then the path extension."""
    if metadata and metadata.get("content_type"):
        return metadata["content_type"]
    file_type = getattr(file, "content_type", None)
    if isinstance(file_type, str) and file_type:
        return file_type
    guessed, _ = mimetypes.guess_type(path)
    return guessed or DEFAULT_CONTENT_TYPE


def read_file_bytes(file: BinaryIO) -> bytes:
    """Read a whole file-like object (from its current position)."""
    data = file.read()
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


async def gather_bounded(
    factories: Sequence[Callable[[], Awaitable[T]]],
    limit: int,
) -> list[T]:
    """
    Run coroutine factories concurrently with at most `limit` in flight.
    Results keep the input order; the first exception propagates.
    """
    semaphore = asyncio.Semaphore(max(1, limit))

    async def run(factory: Callable[[], Awaitable[T]]) -> T:
        async with semaphore:
            return await factory()

    return list(await asyncio.gather(*(run(f) for f in factories)))
