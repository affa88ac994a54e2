"""Smoke tests for FastAPI application endpoints.

This module uses pytest's monkeypatch fixture to mock settings values,
avoiding dependencies on specific configuration files or environment variables.
"""
from unittest.mock import patch

from fastapi.testclient import TestClient

from image_vault import main
from image_vault.main import app
from image_vault.storage import InMemoryStorageClient


def test_health_endpoint(monkeypatch):
    """Test health endpoint with mocked settings."""
    monkeypatch.setattr(main.settings, "environment", "test")
    monkeypatch.setattr(main.settings, "app_version", "1.0.0")

    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "environment": "test",
        "version": "1.0.0",
    }


def test_config_endpoint(monkeypatch):
    """Test config endpoint with mocked settings."""
    monkeypatch.setattr(main.settings, "app_name", "Test App")
    monkeypatch.setattr(main.settings, "app_version", "2.0.0")
    monkeypatch.setattr(main.settings, "environment", "test")
    monkeypatch.setattr(main.settings, "debug", True)
    monkeypatch.setattr(main.settings, "image_bucket", "pictures")
    monkeypatch.setattr(main.settings, "log_level", "DEBUG")
    monkeypatch.setattr(main.settings, "log_json", True)
    monkeypatch.setattr(main.settings, "max_upload_size", 20 * 1024 * 1024)  # 20MB

    client = TestClient(app)
    response = client.get("/config")
    assert response.status_code == 200
    assert response.json() == {
        "app_name": "Test App",
        "app_version": "2.0.0",
        "environment": "test",
        "debug": True,
        "s3_endpoint_url": "http://localhost:9000",
        "s3_region": "us-east-1",
        "image_bucket": "pictures",
        "default_owner": "anon",
        "log_level": "DEBUG",
        "log_json": True,
        "max_upload_size": 20 * 1024 * 1024,
    }


def test_config_endpoint_hides_secrets():
    """Test that credentials are never exposed."""
    client = TestClient(app)
    body = client.get("/config").text

    assert "test-secret-key" not in body
    assert "test-access-key" not in body


def test_startup_creates_table_and_bucket():
    """Test that startup creates the table and the image bucket."""
    storage = InMemoryStorageClient()

    with patch("image_vault.main.init_db") as mock_init_db, \
            patch("image_vault.main.get_storage_client", return_value=storage):
        with TestClient(app) as client:
            assert client.get("/health").status_code == 200

    mock_init_db.assert_called_once()
    assert storage.list_keys("image") == []


def test_view_page_embeds_image():
    """Test the image view page."""
    client = TestClient(app)
    response = client.get("/images/6f1c3b2e-8d4a-4c1e-9b7a-2f5d8e0a1c33/view")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert '<img src="/images/6f1c3b2e-8d4a-4c1e-9b7a-2f5d8e0a1c33"' in response.text
