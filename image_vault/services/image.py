"""Image record service.

Keeps each uploaded blob and its metadata row in correspondence. The two
stores are written in a fixed order without a shared transaction:

* upload stores the blob first, then inserts the row;
* delete removes the blob first, then deletes the row.

A failure between the two steps is never compensated. It is logged and
surfaced as ``UpstreamError``; ``find_orphans`` reports what was left behind.
"""

import logging
import mimetypes
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from image_vault.exceptions import InvalidRequestError, NotFoundError, UpstreamError
from image_vault.models.db import ImageRecord
from image_vault.repositories import ImageRepository
from image_vault.storage.base import StorageClient, StorageError

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "image"
DEFAULT_OWNER = "anon"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass
class ImageDownload:
    """A record together with its stored content."""

    record: ImageRecord
    content: bytes
    content_type: str


@dataclass
class OrphanReport:
    """Result of comparing the bucket against the metadata table."""

    orphan_blobs: List[str] = field(default_factory=list)
    dangling_records: List[UUID] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.orphan_blobs) + len(self.dangling_records)


def guess_content_type(file_name: str) -> str:
    """Derive a content type from a file name's extension.

    Args:
        file_name: File name such as ``cat.png``.

    Returns:
        str: The guessed MIME type, or ``application/octet-stream`` when the
        extension is missing or unknown.
    """
    content_type, _ = mimetypes.guess_type(file_name or "")
    return content_type or DEFAULT_CONTENT_TYPE


def parse_image_id(image_id: Union[str, UUID]) -> UUID:
    """Parse an image identifier.

    Raises:
        InvalidRequestError: If the value is not a valid UUID.
    """
    if isinstance(image_id, UUID):
        return image_id
    try:
        return UUID(str(image_id))
    except ValueError:
        raise InvalidRequestError(f"Invalid image id: {image_id}") from None


def _provided(value: Optional[str]) -> Optional[str]:
    # Empty strings count as "not provided"
    return value if value else None


class ImageService:
    """Upload, fetch, update and delete image records."""

    def __init__(
        self,
        repository: ImageRepository,
        storage: StorageClient,
        bucket: str = DEFAULT_BUCKET,
        default_owner: str = DEFAULT_OWNER,
    ):
        """Initialize the service.

        Args:
            repository: Metadata store for image records.
            storage: Object store for image content.
            bucket: Bucket holding image content.
            default_owner: Owner recorded when an upload does not name one.
        """
        self.repository = repository
        self.storage = storage
        self.bucket = bucket
        self.default_owner = default_owner

    def upload(
        self,
        file_name: str,
        content: Optional[bytes],
        owner: Optional[str] = None,
    ) -> ImageRecord:
        """Store new image content and create its record.

        Args:
            file_name: Original file name.
            content: Raw image bytes, or None when no file was sent.
            owner: Owner label; the default owner is used when empty.

        Returns:
            ImageRecord: The created record with its new identifier.

        Raises:
            InvalidRequestError: If no file was sent or it is empty.
            UpstreamError: If the object store or the database fails.
        """
        if content is None:
            raise InvalidRequestError("No image provided")
        if not content:
            raise InvalidRequestError("File cannot be empty")

        image_id = uuid.uuid4()
        key = str(image_id)
        owner = _provided(owner) or self.default_owner
        logger.info(f"Processing upload: {file_name}, content length: {len(content)}, ID: {image_id}")

        try:
            self.storage.put_object(self.bucket, key, content)
        except StorageError as e:
            raise UpstreamError(f"Failed to store image content: {e}") from e

        try:
            record = self.repository.add(image_id, file_name, owner)
        except SQLAlchemyError as e:
            logger.error(
                f"Image content {self.bucket}/{key} is orphaned: "
                f"record insert failed after upload: {e}"
            )
            raise UpstreamError(f"Failed to save image record: {e}") from e

        logger.info(f"Successfully uploaded image: {image_id}")
        return record

    def fetch(self, image_id: Union[str, UUID]) -> ImageDownload:
        """Get a record and its content.

        Raises:
            InvalidRequestError: If the identifier is malformed.
            NotFoundError: If the record or its content does not exist.
            UpstreamError: If the object store or the database fails.
        """
        image_uuid = parse_image_id(image_id)

        try:
            record = self.repository.get(image_uuid)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to read image record: {e}") from e

        if record is None:
            raise NotFoundError(f"Image with ID {image_uuid} not found")

        try:
            content = self.storage.get_object(self.bucket, record.storage_key)
        except FileNotFoundError:
            logger.warning(f"Record {image_uuid} has no stored content")
            raise NotFoundError(f"Image with ID {image_uuid} not found") from None
        except StorageError as e:
            raise UpstreamError(f"Failed to read image content: {e}") from e

        return ImageDownload(
            record=record,
            content=content,
            content_type=guess_content_type(record.file_name),
        )

    def update(
        self,
        image_id: Union[str, UUID],
        file_name: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> ImageRecord:
        """Change the file name and/or owner of a record.

        Stored content is never touched.

        Raises:
            InvalidRequestError: If neither field is given or the identifier
                is malformed.
            NotFoundError: If the record does not exist.
            UpstreamError: If the database fails.
        """
        file_name = _provided(file_name)
        owner = _provided(owner)
        if file_name is None and owner is None:
            raise InvalidRequestError("No valid data provided for update")

        image_uuid = parse_image_id(image_id)

        try:
            record = self.repository.update(image_uuid, file_name=file_name, owner=owner)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to update image record: {e}") from e

        if record is None:
            raise NotFoundError(f"Image with ID {image_uuid} not found")
        return record

    def delete(self, image_id: Union[str, UUID]) -> None:
        """Delete an image's content and then its record.

        Deleting an unknown identifier succeeds.

        Raises:
            InvalidRequestError: If the identifier is malformed.
            UpstreamError: If the object store or the database fails.
        """
        image_uuid = parse_image_id(image_id)
        key = str(image_uuid)

        try:
            self.storage.delete_object(self.bucket, key)
        except StorageError as e:
            raise UpstreamError(f"Failed to delete image content: {e}") from e

        try:
            deleted = self.repository.delete(image_uuid)
        except SQLAlchemyError as e:
            logger.error(
                f"Record {image_uuid} is dangling: content was deleted "
                f"but record delete failed: {e}"
            )
            raise UpstreamError(f"Failed to delete image record: {e}") from e

        if deleted:
            logger.info(f"Deleted image: {image_uuid}")
        else:
            logger.info(f"Delete of unknown image treated as success: {image_uuid}")

    def find_orphans(self) -> OrphanReport:
        """Compare stored content against records without changing either.

        Returns:
            OrphanReport: Keys with no record and records with no content.

        Raises:
            UpstreamError: If the object store or the database fails.
        """
        try:
            keys = self.storage.list_keys(self.bucket)
        except StorageError as e:
            raise UpstreamError(f"Failed to list image content: {e}") from e

        try:
            record_ids = set(self.repository.list_ids())
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to list image records: {e}") from e

        key_ids, orphan_blobs = _split_keys(keys)
        orphan_blobs.extend(key for key, key_id in key_ids if key_id not in record_ids)
        stored_ids = {key_id for _, key_id in key_ids}

        report = OrphanReport(
            orphan_blobs=sorted(orphan_blobs),
            dangling_records=sorted(record_ids - stored_ids, key=str),
        )
        logger.info(
            f"Orphan sweep: {len(report.orphan_blobs)} orphan blobs, "
            f"{len(report.dangling_records)} dangling records"
        )
        return report


def _split_keys(keys: List[str]) -> Tuple[List[Tuple[str, UUID]], List[str]]:
    """Separate keys that name a record id from keys that never could."""
    parsed: List[Tuple[str, UUID]] = []
    foreign: List[str] = []
    for key in keys:
        try:
            key_id = UUID(key)
        except ValueError:
            foreign.append(key)
            continue
        # Uploads only ever write the hyphenated lowercase form
        if str(key_id) == key:
            parsed.append((key, key_id))
        else:
            foreign.append(key)
    return parsed, foreign
