"""FastAPI dependency injection configuration."""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from config import get_settings
from image_vault.db import get_db
from image_vault.repositories import ImageDBRepository, ImageRepository
from image_vault.services import ImageService
from image_vault.storage.base import StorageClient
from image_vault.storage.s3 import S3StorageClient

logger = logging.getLogger(__name__)


# Global instance for storage client
_storage_client: StorageClient | None = None


def get_image_repository(db: Session = Depends(get_db)) -> ImageRepository:
    """Get an image repository bound to the request's database session."""
    return ImageDBRepository(db)


def get_storage_client() -> StorageClient:
    """Get the process-wide object storage client.

    The client is created on first use and shared by every request
    afterwards.

    Returns:
        StorageClient: The configured storage client instance
    """
    global _storage_client

    if _storage_client is None:
        settings = get_settings()
        _storage_client = S3StorageClient(settings=settings)
        logger.info(f"Created S3 storage client for bucket: {settings.image_bucket}")

    return _storage_client


def get_image_service(
    repository: ImageRepository = Depends(get_image_repository),
    storage: StorageClient = Depends(get_storage_client),
) -> ImageService:
    """Get an image service wired to the metadata and object stores.

    Args:
        repository: Image metadata repository
        storage: Object storage client

    Returns:
        ImageService: Service for image record operations
    """
    settings = get_settings()
    return ImageService(
        repository=repository,
        storage=storage,
        bucket=settings.image_bucket,
        default_owner=settings.default_owner,
    )
