"""Repository implementations for data access."""

from .image import ImageDBRepository, ImageRepository

__all__ = [
    "ImageRepository",
    "ImageDBRepository",
]
