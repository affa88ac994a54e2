"""Database models for the Image Vault service."""

from .db import Base, ImageRecord

__all__ = ["Base", "ImageRecord"]
