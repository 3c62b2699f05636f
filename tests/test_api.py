"""Tests for the Storage HTTP API.

The storage dependency is overridden with a Supabase backend over fakes;
error-mapping tests swap in a Firebase backend over a fake bucket.
"""

import base64

from hopecare.main import app
from hopecare.storage import get_selection, get_storage
from hopecare.storage.factory import FallbackDueToError
from hopecare.storage.firebase_storage import FirebaseStorage
from hopecare.core.errors import ConfigError
from tests.fakes import SUPABASE_BASE, FakeGCSBucket


class TestRoot:
    def test_root(self, api_client):
        response = api_client.get("/")
        assert response.status_code == 200
        assert response.json()["message"] == "HopeCare Storage API"


class TestProvider:
    def test_reports_injected_backend(self, api_client):
        response = api_client.get("/storage/provider")
        assert response.status_code == 200
        assert response.json()["provider"] == "supabase"

    def test_reports_fallback_reason(self, api_client):
        fallback = FallbackDueToError(backend=FirebaseStorage(bucket_name=""), reason=ConfigError("bad flag"))
        app.dependency_overrides[get_selection] = lambda: fallback

        data = api_client.get("/storage/provider").json()

        assert data["fellBack"] is True
        assert data["reason"] == "bad flag"


class TestUploads:
    def test_upload_media(self, api_client, supabase_client):
        response = api_client.post(
            "/storage/uploads",
            files={"file": ("flyer.png", b"\x89PNG fake", "image/png")},
            data={"directory": "avatars/campaigns"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["path"].startswith("avatars/campaigns/")
        assert body["path"].endswith(".png")
        assert body["url"].startswith(f"{SUPABASE_BASE}/storage/v1/object/public/avatars/campaigns/")
        key = body["path"].split("/", 1)[1]
        assert supabase_client.storage.buckets["avatars"][key].data == b"\x89PNG fake"

    def test_upload_rejects_unsupported_type(self, api_client):
        response = api_client.post(
            "/storage/uploads",
            files={"file": ("tool.exe", b"MZ", "application/x-msdownload")},
        )
        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_upload_to_missing_bucket_is_bad_gateway(self, api_client):
        response = api_client.post(
            "/storage/uploads",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            data={"directory": "missing-bucket/notes"},
        )
        assert response.status_code == 502
        assert response.json()["detail"] == "Storage operation failed. Please try again"

    def test_upload_data_url(self, api_client, supabase_client):
        payload = base64.b64encode(b"thank you note").decode()
        response = api_client.post(
            "/storage/data-url",
            json={"path": "uploads/notes/thanks.txt", "dataUrl": f"data:text/plain;base64,{payload}"},
        )

        assert response.status_code == 201
        assert supabase_client.storage.buckets["uploads"]["notes/thanks.txt"].data == b"thank you note"

    def test_upload_bad_data_url(self, api_client):
        response = api_client.post(
            "/storage/data-url",
            json={"path": "uploads/x.txt", "dataUrl": "plain text"},
        )
        assert response.status_code == 400


class TestUrlsAndFiles:
    def test_get_url_and_signed_url(self, api_client, supabase_backend):
        api_client.post(
            "/storage/data-url",
            json={"path": "bucket/file.png", "dataUrl": "data:image/png;base64,iVBORw0KGgo="},
        )

        public = api_client.get("/storage/url", params={"path": "bucket/file.png"})
        signed = api_client.get("/storage/signed-url", params={"path": "bucket/file.png", "expiresIn": 60})

        assert public.status_code == 200
        assert signed.status_code == 200
        assert "token=signed-60" in signed.json()["url"]
        assert signed.json()["url"] != public.json()["url"]

    def test_signed_url_rejects_non_positive_expiry(self, api_client):
        response = api_client.get("/storage/signed-url", params={"path": "bucket/file.png", "expiresIn": 0})
        assert response.status_code == 422

    def test_list_and_delete(self, api_client):
        api_client.post(
            "/storage/data-url",
            json={"path": "test/list/a.txt", "dataUrl": "data:,a"},
        )

        listed = api_client.get("/storage/files", params={"path": "test/list"})
        assert listed.status_code == 200
        assert listed.json()["files"] == [f"{SUPABASE_BASE}/storage/v1/object/public/test/list/a.txt"]

        deleted = api_client.delete("/storage/files", params={"path": "test/list/a.txt"})
        assert deleted.status_code == 204

        again = api_client.delete("/storage/files", params={"path": "test/list/a.txt"})
        assert again.status_code == 404


class TestSelfCheck:
    def test_self_check(self, api_client):
        response = api_client.post("/storage/self-check")

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "supabase"
        assert body["success"] is True
        assert body["uploadTest"]["success"] is True
        assert body["deleteTest"]["success"] is True


class TestErrorStatusCodes:
    """The HTTP status depends on the error type, whichever backend produced it."""

    def test_firebase_delete_missing_is_not_found(self, api_client):
        app.dependency_overrides[get_storage] = lambda: FirebaseStorage(bucket=FakeGCSBucket())

        response = api_client.delete("/storage/files", params={"path": "tmp/missing.txt"})

        assert response.status_code == 404
        assert response.json()["detail"] == "Object not found: tmp/missing.txt"

    def test_firebase_bad_data_url_is_bad_request(self, api_client):
        app.dependency_overrides[get_storage] = lambda: FirebaseStorage(bucket=FakeGCSBucket())

        response = api_client.post("/storage/data-url", json={"path": "notes/x.txt", "dataUrl": "plain text"})

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Invalid data URL")

    def test_misconfigured_firebase_is_unavailable(self, api_client, mocker):
        mocker.patch("hopecare.storage.firebase_storage.firebase_admin.get_app", return_value=object())
        mocker.patch(
            "hopecare.storage.firebase_storage.firebase_storage.bucket",
            side_effect=ValueError("Storage bucket name not specified"),
        )
        backend = FirebaseStorage(bucket_name="")
        app.dependency_overrides[get_storage] = lambda: backend

        response = api_client.get("/storage/url", params={"path": "a/b.txt"})

        assert response.status_code == 503
        detail = response.json()["detail"]
        assert detail == "The application is misconfigured. Please contact an administrator"
        assert "bucket name" not in detail

    def test_vendor_value_error_is_not_a_client_error(self, api_client, gcs_bucket):
        gcs_bucket.fail_with = ValueError("Invalid JSON in service response")
        app.dependency_overrides[get_storage] = lambda: FirebaseStorage(bucket=gcs_bucket)

        response = api_client.get("/storage/files", params={"path": "gallery"})

        assert response.status_code == 502
        assert response.json()["detail"] == "Storage operation failed. Please try again"
