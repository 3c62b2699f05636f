"""Behaviour every storage backend shares, run against both providers."""

import io
import time

import pytest

from hopecare.core.errors import InvalidDataUrlError, StorageNotFoundError
from hopecare.storage.results import DeleteResult, ListResult, UrlResult


class TestUploadAndResolve:
    @pytest.mark.asyncio
    async def test_upload_file_then_get_url(self, backend):
        """upload_file followed by get_file_url yields a non-empty URL and no error."""
        upload = await backend.upload_file("test/report.pdf", io.BytesIO(b"%PDF-1.4 fake"))
        assert isinstance(upload, UrlResult)
        assert upload.error is None
        assert upload.url

        resolved = await backend.get_file_url("test/report.pdf")
        assert resolved.error is None
        assert resolved.url

    @pytest.mark.asyncio
    async def test_upload_buffer(self, backend):
        result = await backend.upload_buffer("test/raw.bin", bytearray(b"\x00\x01\x02"))
        assert result.ok
        assert result.url

    @pytest.mark.asyncio
    async def test_upload_data_url(self, backend):
        result = await backend.upload_data_url("test/hello.txt", "data:text/plain;base64,SGVsbG8=")
        assert result.ok
        assert result.url

    @pytest.mark.asyncio
    async def test_upload_malformed_data_url_returns_error(self, backend):
        """A bad data URL is reported in the envelope, never raised."""
        result = await backend.upload_data_url("test/bad.txt", "not-a-data-url")
        assert result.url == ""
        assert isinstance(result.error, InvalidDataUrlError)

    @pytest.mark.asyncio
    async def test_upload_twice_overwrites(self, backend):
        """Second upload to the same path succeeds (last write wins)."""
        first = await backend.upload_buffer("test/same.txt", b"first")
        second = await backend.upload_buffer("test/same.txt", b"second")
        assert first.ok
        assert second.ok

        resolved = await backend.get_file_url("test/same.txt")
        assert resolved.error is None
        assert resolved.url


class TestDeleteAndList:
    @pytest.mark.asyncio
    async def test_delete_missing_path(self, backend):
        """Deleting a path that was never uploaded reports failure without raising."""
        result = await backend.delete_file("test/never-uploaded.txt")
        assert isinstance(result, DeleteResult)
        assert result.success is False
        assert isinstance(result.error, StorageNotFoundError)

    @pytest.mark.asyncio
    async def test_list_empty_prefix(self, backend):
        result = await backend.list_files("test/nothing-here")
        assert isinstance(result, ListResult)
        assert result.files == []
        assert result.error is None

    @pytest.mark.asyncio
    async def test_list_returns_urls_for_direct_children(self, backend):
        await backend.upload_buffer("test/docs/a.txt", b"a")
        await backend.upload_buffer("test/docs/b.txt", b"b")
        await backend.upload_buffer("test/docs/nested/c.txt", b"c")

        result = await backend.list_files("test/docs")

        assert result.error is None
        assert len(result.files) == 2
        assert all(url.startswith("https://") for url in result.files)
        assert any("a.txt" in url for url in result.files)
        assert not any("c.txt" in url for url in result.files)


class TestRoundTripScenario:
    @pytest.mark.asyncio
    async def test_upload_resolve_delete_sequence(self, backend):
        """Upload a 28-byte blob, resolve it and delete it on one instance."""
        content = b"HopeCare storage check blob!"
        assert len(content) == 28
        path = f"test/test-{int(time.time() * 1000)}.txt"

        upload = await backend.upload_file(path, io.BytesIO(content), {"content_type": "text/plain"})
        assert upload.error is None

        resolved = await backend.get_file_url(path)
        assert resolved.error is None
        assert resolved.url

        deleted = await backend.delete_file(path)
        assert deleted.success is True
        assert deleted.error is None
