"""Storage client interface for image content."""

from typing import List, Protocol, runtime_checkable


@runtime_checkable
class StorageClient(Protocol):
    """Abstract interface for object storage operations.

    Blobs are opaque bytes addressed by bucket and key. Implementations
    translate backend failures into ``StorageError`` and missing objects
    into ``FileNotFoundError``.
    """

    def put_object(self, bucket: str, key: str, content: bytes) -> None:
        """Store content under bucket/key, overwriting any existing object.

        Raises:
            StorageError: If the object cannot be written.
        """
        ...

    def get_object(self, bucket: str, key: str) -> bytes:
        """Read the content stored under bucket/key.

        Raises:
            FileNotFoundError: If the object or bucket does not exist.
            StorageError: If the object cannot be read.
        """
        ...

    def delete_object(self, bucket: str, key: str) -> None:
        """Delete bucket/key. Deleting a missing object is not an error.

        Raises:
            StorageError: If the delete request fails.
        """
        ...

    def list_keys(self, bucket: str) -> List[str]:
        """List every key in a bucket.

        Raises:
            StorageError: If the bucket cannot be listed.
        """
        ...

    def ensure_bucket(self, bucket: str) -> bool:
        """Create the bucket if it does not exist.

        Returns:
            bool: True if the bucket was created, False if it already existed.

        Raises:
            StorageError: If the buckets cannot be listed or created.
        """
        ...


class StorageError(Exception):
    """Base exception for storage-related errors."""
    pass
