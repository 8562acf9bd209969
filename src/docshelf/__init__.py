"""docshelf: schemaless, revisioned document collections on SQLite."""

__version__ = "0.1.0"

from docshelf.collection import Collection
from docshelf.config import CollectionOptions
from docshelf.connector import Connector
from docshelf.errors import (
    BackendError,
    ConfigurationError,
    DocshelfError,
    DocumentValidationError,
    FilterError,
    TypeMismatchError,
)
from docshelf.filters import Comparison, FilterQuery
from docshelf.models import DocumentModel, deep_merge
from docshelf.store import Shelf, parse_storage_target

__all__ = [
    "__version__",
    "Collection",
    "CollectionOptions",
    "Connector",
    "Shelf",
    "parse_storage_target",
    "FilterQuery",
    "Comparison",
    "DocumentModel",
    "deep_merge",
    "DocshelfError",
    "ConfigurationError",
    "DocumentValidationError",
    "TypeMismatchError",
    "FilterError",
    "BackendError",
]
