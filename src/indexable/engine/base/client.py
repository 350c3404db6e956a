"""Engine client contract — The parameter-map interface the core talks to.

Every call takes a single parameter dict built by the parameter builder,
using the keys ``index``, ``type``, ``id``, ``body``, ``fields``, ``size``,
``from`` and ``ignore_conflicts``, and returns the engine's response as a
plain dict.

Implementations own everything below that line: connection pooling,
timeouts, retries, and the translation to a concrete wire API.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

Params = dict[str, Any]
Response = dict[str, Any]


class IndicesClient(ABC):
    """Index and mapping administration namespace."""

    @abstractmethod
    async def exists(self, params: Params) -> bool:
        """Return whether the index (or index type) exists."""

    @abstractmethod
    async def create(self, params: Params) -> Response:
        """Create an index, optionally with ``body.settings``."""

    @abstractmethod
    async def delete(self, params: Params) -> Response:
        """Delete an index."""

    @abstractmethod
    async def get_mapping(self, params: Params) -> Response:
        """Fetch the field mapping for an index type."""

    @abstractmethod
    async def put_mapping(self, params: Params) -> Response:
        """Install a field mapping, keyed by type name inside ``body``."""

    @abstractmethod
    async def delete_mapping(self, params: Params) -> Response:
        """Remove the field mapping of an index type."""

    @abstractmethod
    async def optimize(self, params: Params) -> Response:
        """Merge index segments."""


class EngineClient(ABC):
    """Abstract search engine client.

    All methods perform exactly one request against the engine. Failures to
    reach the engine raise ``EngineUnavailableError``; errors reported by the
    engine itself propagate unchanged.
    """

    @property
    @abstractmethod
    def indices(self) -> IndicesClient:
        """Administrative sub-client."""

    @abstractmethod
    async def index(self, params: Params) -> Response:
        """Create or replace a document."""

    @abstractmethod
    async def delete(self, params: Params) -> Response:
        """Delete a document."""

    @abstractmethod
    async def get(self, params: Params) -> Response:
        """Fetch a document by id."""

    @abstractmethod
    async def search(self, params: Params) -> Response:
        """Run a search request."""

    @abstractmethod
    async def bulk(self, params: Params) -> Response:
        """Run a batch of index/delete actions in a single request."""

    async def close(self) -> None:
        """Release client resources. No-op by default."""
