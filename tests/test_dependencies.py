"""Tests for dependency wiring."""

from unittest.mock import patch

import pytest

from image_vault import dependencies
from image_vault.dependencies import get_image_repository, get_image_service, get_storage_client
from image_vault.repositories import ImageDBRepository
from image_vault.storage import S3StorageClient


@pytest.fixture(autouse=True)
def reset_storage_client():
    dependencies._storage_client = None
    yield
    dependencies._storage_client = None


def test_storage_client_is_process_singleton():
    with patch("image_vault.storage.s3.boto3.client") as mock_boto3_client:
        first = get_storage_client()
        second = get_storage_client()

    assert isinstance(first, S3StorageClient)
    assert first is second
    mock_boto3_client.assert_called_once()


def test_image_repository_uses_session(db_session):
    repository = get_image_repository(db_session)

    assert isinstance(repository, ImageDBRepository)
    assert repository.db is db_session


def test_image_service_uses_settings(repository, storage):
    service = get_image_service(repository=repository, storage=storage)

    assert service.repository is repository
    assert service.storage is storage
    assert service.bucket == "image"
    assert service.default_owner == "anon"
