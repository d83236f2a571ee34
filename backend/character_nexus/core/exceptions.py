"""
Custom exceptions for the application.

Every application error carries an ErrorKind tag. The API layer renders
errors by dispatching on that tag, never on the concrete class.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Wire-level error classification."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    BAD_REQUEST = "BAD_REQUEST"
    DATABASE = "DATABASE_ERROR"
    SCRAPING = "SCRAPING_FAILED"
    IMAGE_PROCESSING = "IMAGE_PROCESSING_FAILED"
    INTERNAL = "INTERNAL_ERROR"


class NexusError(Exception):
    """Base exception for character nexus."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(NexusError):
    """Input failed schema validation. ``details`` holds the field errors."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str = "Validation failed", fields: Optional[list] = None):
        super().__init__(message, details={"fields": list(fields or [])})

    @property
    def fields(self) -> list:
        return self.details["fields"]


class NotFoundError(NexusError):
    """Resource not found."""

    kind = ErrorKind.NOT_FOUND


class BadRequestError(NexusError):
    """Request is well-formed but asks for something unsupported."""

    kind = ErrorKind.BAD_REQUEST


class DatabaseError(NexusError):
    """Storage-layer failure. The message is always generic."""

    kind = ErrorKind.DATABASE

    def __init__(self, message: str = "Database operation failed"):
        super().__init__(message)


class ScrapingError(NexusError):
    """Fetching or reading a remote character page failed."""

    kind = ErrorKind.SCRAPING


class ImageProcessingError(NexusError):
    """Downloading, decoding or storing an image failed."""

    kind = ErrorKind.IMAGE_PROCESSING


class DatabaseNotInitializedError(RuntimeError):
    """The persistence gateway was used before init() or after close()."""

    pass
