"""Image repository for managing image metadata."""

import logging
from typing import List, Optional, Protocol
from uuid import UUID

from sqlalchemy.orm import Session

from image_vault.models.db import ImageRecord

logger = logging.getLogger(__name__)


class ImageRepository(Protocol):
    """Interface for image metadata storage.

    One row per image, keyed by the identifier that is also the object store
    key of the image content.
    """

    def add(self, image_id: UUID, file_name: str, owner: str) -> ImageRecord:
        """Insert a new image record.

        Args:
            image_id: Identifier assigned by the caller.
            file_name: Original file name.
            owner: Owner label.

        Returns:
            ImageRecord: The stored record.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the insert fails, e.g. on a
                duplicate id.
        """
        ...

    def get(self, image_id: UUID) -> Optional[ImageRecord]:
        """Get a record by id, or None if it does not exist."""
        ...

    def update(
        self,
        image_id: UUID,
        file_name: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> Optional[ImageRecord]:
        """Change only the supplied fields of a record.

        Returns:
            Optional[ImageRecord]: The updated record, or None if not found.
        """
        ...

    def delete(self, image_id: UUID) -> bool:
        """Delete a record.

        Returns:
            bool: True if a row was deleted, False if none existed.
        """
        ...

    def list_ids(self) -> List[UUID]:
        """Get the ids of all stored records."""
        ...

    def count(self) -> int:
        """Get the total number of records."""
        ...


class ImageDBRepository(ImageRepository):
    """SQLAlchemy-based implementation of ImageRepository."""

    def __init__(self, db: Session):
        """Initialize the repository with a database session.

        Args:
            db: SQLAlchemy session for database operations
        """
        self.db = db

    def add(self, image_id: UUID, file_name: str, owner: str) -> ImageRecord:
        try:
            record = ImageRecord(id=image_id, file_name=file_name, owner=owner)
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)

            logger.info(f"Created image record: {image_id}")
            return record

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create image record {image_id}: {e}")
            raise

    def get(self, image_id: UUID) -> Optional[ImageRecord]:
        record = self.db.query(ImageRecord).filter(ImageRecord.id == image_id).first()
        if record:
            logger.debug(f"Found image record: {image_id}")
        else:
            logger.debug(f"Image record not found: {image_id}")
        return record

    def update(
        self,
        image_id: UUID,
        file_name: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> Optional[ImageRecord]:
        record = self.get(image_id)
        if not record:
            logger.warning(f"Cannot update non-existent image record: {image_id}")
            return None

        try:
            if file_name is not None:
                record.file_name = file_name

            if owner is not None:
                record.owner = owner

            self.db.commit()
            self.db.refresh(record)

            logger.info(f"Updated image record: {image_id}")
            return record

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update image record {image_id}: {e}")
            raise

    def delete(self, image_id: UUID) -> bool:
        record = self.get(image_id)
        if not record:
            logger.debug(f"No image record to delete: {image_id}")
            return False

        try:
            self.db.delete(record)
            self.db.commit()
            logger.info(f"Deleted image record: {image_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete image record {image_id}: {e}")
            raise

    def list_ids(self) -> List[UUID]:
        return [row.id for row in self.db.query(ImageRecord.id).all()]

    def count(self) -> int:
        return self.db.query(ImageRecord).count()
