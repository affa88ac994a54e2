"""In-memory implementation of StorageClient."""
import logging
from typing import List

from .base import StorageClient, StorageError

logger = logging.getLogger(__name__)


class InMemoryStorageClient(StorageClient):
    """Dictionary-backed object storage.

    Data is not persisted and will be lost when the process exits.
    Only used as a test double; the application always talks to S3.
    """

    def __init__(self):
        self._buckets: dict[str, dict[str, bytes]] = {}
        logger.info("Initialized InMemoryStorageClient")

    def _bucket(self, bucket: str) -> dict[str, bytes]:
        if bucket not in self._buckets:
            raise StorageError(f"Bucket does not exist: {bucket}")
        return self._buckets[bucket]

    def put_object(self, bucket: str, key: str, content: bytes) -> None:
        self._bucket(bucket)[key] = bytes(content)
        logger.debug(f"Stored object {bucket}/{key} ({len(content)} bytes)")

    def get_object(self, bucket: str, key: str) -> bytes:
        objects = self._buckets.get(bucket, {})
        if key not in objects:
            raise FileNotFoundError(f"Object not found: {bucket}/{key}")
        return objects[key]

    def delete_object(self, bucket: str, key: str) -> None:
        self._bucket(bucket).pop(key, None)
        logger.debug(f"Deleted object {bucket}/{key}")

    def list_keys(self, bucket: str) -> List[str]:
        return sorted(self._bucket(bucket))

    def ensure_bucket(self, bucket: str) -> bool:
        if bucket in self._buckets:
            return False
        self._buckets[bucket] = {}
        logger.info(f"Created bucket: {bucket}")
        return True

    def clear(self) -> None:
        """Remove all buckets and objects.

        This is mainly useful for testing purposes.
        """
        self._buckets.clear()
