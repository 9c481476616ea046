import os
import tempfile
from typing import Generator

# Must be set before the application modules read their settings
_TMP_ROOT = tempfile.mkdtemp(prefix="playapp-tests-")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
os.environ["PUBLIC_DIR"] = os.path.join(_TMP_ROOT, "public")
os.environ["UPLOAD_TEMP_DIR"] = os.path.join(_TMP_ROOT, "public", "temp")

import cloudinary.uploader  # noqa: E402
import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from database import ensure_indexes, get_db  # noqa: E402
from main import app  # noqa: E402
from tests.helpers import login, register  # noqa: E402


class UploadRecorder:
    """Stands in for cloudinary.uploader.upload and records each call."""

    def __init__(self):
        self.calls = []
        self.fail = False
        # 1-based call number from which uploads start failing
        self.fail_from = None

    def __call__(self, path, **options):
        self.calls.append((path, options))
        if self.fail or (self.fail_from is not None and len(self.calls) >= self.fail_from):
            raise RuntimeError("cloudinary is unavailable")
        name = os.path.basename(path)
        return {
            "url": f"http://res.cloudinary.com/demo/{name}",
            "secure_url": f"https://res.cloudinary.com/demo/{name}",
            "resource_type": "image",
        }


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["playapp_test"]
    ensure_indexes(db)
    return db


@pytest.fixture
def uploads(monkeypatch) -> UploadRecorder:
    recorder = UploadRecorder()
    monkeypatch.setattr(cloudinary.uploader, "upload", recorder)
    return recorder


@pytest.fixture
def client(mongo_db, uploads) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_db] = lambda: mongo_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def tokens(client):
    """Register the default user and log in; returns the login payload."""
    assert register(client).status_code == 201
    resp = login(client)
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]
