"""Storage module for image content."""

from .base import StorageClient, StorageError
from .memory import InMemoryStorageClient
from .s3 import S3StorageClient

__all__ = ["StorageClient", "StorageError", "InMemoryStorageClient", "S3StorageClient"]
