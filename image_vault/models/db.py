"""SQLAlchemy database models."""

from sqlalchemy import Column, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base

# Create the declarative base
Base = declarative_base()


class ImageRecord(Base):
    """Metadata row describing one stored image.

    The blob itself lives in the object store under the hyphenated textual
    form of ``id``; no path is stored here.
    """
    __tablename__ = "image"

    # Assigned by the service at upload time, never by the database
    id = Column(UUID(as_uuid=True), primary_key=True, nullable=False)

    # Original file name, used for the content type and download name
    file_name = Column(String, nullable=False)

    # Free-text owner label
    owner = Column(String, nullable=False)

    @property
    def storage_key(self) -> str:
        """Object store key holding this record's content."""
        return str(self.id)

    def __repr__(self) -> str:
        return f"<ImageRecord(id={self.id}, file_name={self.file_name!r}, owner={self.owner!r})>"
