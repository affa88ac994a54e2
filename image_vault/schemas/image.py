"""Image-related Pydantic schemas for API requests and responses."""

from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ImageRecordResponse(BaseModel):
    """Metadata of a stored image.

    Returned when an image is uploaded or its metadata is updated. The id
    can be used to fetch, update or delete the image afterwards.
    """

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "6f1c3b2e-8d4a-4c1e-9b7a-2f5d8e0a1c33",
                    "file_name": "cat.png",
                    "owner": "anon",
                }
            ]
        },
    )

    id: UUID = Field(..., description="Unique identifier of the image.")
    file_name: str = Field(..., description="Original file name of the image.")
    owner: str = Field(..., description="Owner label of the image.")


class ImageUpdateRequest(BaseModel):
    """Partial update of an image record.

    Fields that are omitted, null or empty strings are left unchanged.
    """

    model_config = ConfigDict(
        json_schema_extra={"examples": [{"owner": "alice"}, {"file_name": "dog.jpg"}]}
    )

    file_name: Optional[str] = Field(None, description="New file name.")
    owner: Optional[str] = Field(None, description="New owner label.")

    @field_validator("file_name", "owner", mode="after")
    @classmethod
    def empty_as_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty string as not provided."""
        return v if v else None

    def has_changes(self) -> bool:
        """Whether at least one field would be changed."""
        return self.file_name is not None or self.owner is not None


class OrphanReportResponse(BaseModel):
    """Inconsistencies between the object store and the metadata table."""

    orphan_blobs: List[str] = Field(
        default_factory=list,
        description="Object keys with no matching image record."
    )
    dangling_records: List[UUID] = Field(
        default_factory=list,
        description="Image records whose content is missing."
    )
    count: int = Field(..., ge=0, description="Total number of inconsistencies.")
