"""Structured error types for docshelf."""

from __future__ import annotations

import sqlite3

# Backend failures are sqlite3 errors raised by the driver and are never wrapped.
BackendError = sqlite3.Error


class DocshelfError(Exception):
    """Base error for all docshelf errors."""


class ConfigurationError(DocshelfError):
    """Raised when a collection is constructed with invalid options."""

    def __init__(self, message: str, *, collection: str | None = None) -> None:
        self.collection = collection
        if collection is not None:
            message = f'Invalid configuration for collection "{collection}": {message}'
        super().__init__(message)


class DocumentValidationError(DocshelfError):
    """Raised when a document cannot be written as given."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class TypeMismatchError(DocumentValidationError):
    """Raised when a document is not an instance of the collection's model."""

    def __init__(self, expected: type, actual: type) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f'The document must be of type "{expected.__name__}", got "{actual.__name__}".'
        )


class FilterError(DocshelfError, ValueError):
    """Raised when a filter description is malformed."""
