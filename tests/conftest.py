"""Pytest fixtures for HopeCare storage tests.

Backends are built around in-memory fakes of the vendor SDKs (see
tests/fakes.py), so no test talks to Firebase or Supabase.
"""

import pytest
from fastapi.testclient import TestClient

from hopecare.main import app
from hopecare.storage import get_storage
from hopecare.storage.firebase_storage import FirebaseStorage
from hopecare.storage.supabase_storage import SupabaseStorage
from tests.fakes import FakeGCSBucket, FakeSupabaseClient


@pytest.fixture
def gcs_bucket() -> FakeGCSBucket:
    return FakeGCSBucket()


@pytest.fixture
def firebase_backend(gcs_bucket) -> FirebaseStorage:
    return FirebaseStorage(bucket=gcs_bucket, bucket_name=gcs_bucket.name)


@pytest.fixture
def supabase_client() -> FakeSupabaseClient:
    return FakeSupabaseClient(buckets=("uploads", "test", "bucket", "avatars"))


@pytest.fixture
def supabase_backend(supabase_client) -> SupabaseStorage:
    return SupabaseStorage(client=supabase_client, default_bucket="uploads")


@pytest.fixture(params=["firebase", "supabase"])
def backend(request, firebase_backend, supabase_backend):
    """Each contract test runs once per provider."""
    return firebase_backend if request.param == "firebase" else supabase_backend


@pytest.fixture
def api_client(supabase_backend):
    """TestClient with the storage dependency bound to a fake Supabase backend."""
    app.dependency_overrides[get_storage] = lambda: supabase_backend
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
