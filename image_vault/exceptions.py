"""Errors raised by the image record service."""


class ImageServiceError(Exception):
    """Base exception for image record operations."""
    pass


class InvalidRequestError(ImageServiceError):
    """The request is malformed or missing required input."""
    pass


class NotFoundError(ImageServiceError):
    """No matching record and/or stored content."""
    pass


class UpstreamError(ImageServiceError):
    """The object store or the metadata database failed."""
    pass
