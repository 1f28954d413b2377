"""Pytest configuration and fixtures."""

import os
import tempfile

# Set test environment variables before importing app modules
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="site_uploads_"))
os.environ.setdefault("DATABASE_NAME", "site_test")

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from main import app, get_admin_password, get_upload_dir

ADMIN_PASSWORD = "test-admin-secret"


@pytest.fixture
def mock_db(monkeypatch):
    """In-memory database swapped in for the real one."""
    db = mongomock.MongoClient()["site_test"]
    monkeypatch.setattr(database, "db", db)
    return db


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture
def client(mock_db, upload_dir):
    app.dependency_overrides[get_admin_password] = lambda: ADMIN_PASSWORD
    app.dependency_overrides[get_upload_dir] = lambda: str(upload_dir)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"x-admin-password": ADMIN_PASSWORD}


@pytest.fixture
def registered_user(client):
    body = {"name": "Asha", "email": "asha@example.com", "password": "pw-123", "mobile": "9990001111"}
    response = client.post("/api/register", json=body)
    assert response.status_code == 200
    return response.json()["user"]
