"""Base engine interface — Abstract client contract and exceptions."""

from indexable.engine.base.client import EngineClient, IndicesClient
from indexable.engine.base.exceptions import (
    ConfigurationError,
    DocumentMissingError,
    EngineUnavailableError,
    IndexableError,
)

__all__ = [
    "ConfigurationError",
    "DocumentMissingError",
    "EngineClient",
    "EngineUnavailableError",
    "IndexableError",
    "IndicesClient",
]
