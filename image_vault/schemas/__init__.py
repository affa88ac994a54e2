"""Pydantic schemas for request/response validation."""

from .image import ImageRecordResponse, ImageUpdateRequest, OrphanReportResponse

__all__ = [
    "ImageRecordResponse",
    "ImageUpdateRequest",
    "OrphanReportResponse",
]
