"""Indexable exceptions.

Engine API errors (``elasticsearch.ApiError`` and its subclasses) are not
part of this hierarchy: they propagate to the caller unchanged.
"""


class IndexableError(Exception):
    """Base exception for indexable errors."""


class DocumentMissingError(IndexableError):
    """Raised when indexing a record that has no persisted identity."""


class EngineUnavailableError(IndexableError):
    """Raised when a call to the search engine cannot complete."""


class ConfigurationError(IndexableError):
    """Raised when configuration is invalid."""
