"""Service layer coordinating the metadata and object stores."""

from .image import ImageDownload, ImageService, OrphanReport, guess_content_type, parse_image_id

__all__ = [
    "ImageService",
    "ImageDownload",
    "OrphanReport",
    "guess_content_type",
    "parse_image_id",
]
