"""Collections — Search result pages and bulk-indexable record lists."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from indexable.engine.base.exceptions import DocumentMissingError

if TYPE_CHECKING:
    from indexable.core.indexable import Indexable
    from indexable.core.model import SearchableModel

logger = logging.getLogger(__name__)

R = TypeVar("R")


class ResultCollection(Sequence, Generic[R]):
    """One page of hydrated search results plus the response metadata.

    Items keep the engine's hit order. The collection is read-only once
    built.

    Args:
        items: Hydrated records, in hit order.
        meta: The raw search response.
    """

    def __init__(self, items: Iterable[Indexable[R]] = (), meta: dict[str, Any] | None = None) -> None:
        meta = meta or {}
        self._items: tuple[Indexable[R], ...] = tuple(items)
        self._took = meta.get("took")
        self._timed_out = meta.get("timed_out")
        self._shards = meta.get("_shards")
        self._hits = meta.get("hits") or {}
        self._aggregations = meta.get("aggregations") or {}

    @overload
    def __getitem__(self, index: int) -> Indexable[R]: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Indexable[R], ...]: ...

    def __getitem__(self, index: int | slice) -> Indexable[R] | tuple[Indexable[R], ...]:
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Indexable[R]]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ResultCollection(items={len(self._items)}, total_hits={self.total_hits})"

    def records(self) -> list[R]:
        """The wrapped ORM records, in hit order."""
        return [item.record for item in self._items]

    @property
    def total_hits(self) -> int | None:
        total = self._hits.get("total")
        # Engines from 7.0 on report {"value": n, "relation": "eq"}
        if isinstance(total, dict):
            return total.get("value")
        return total

    @property
    def max_score(self) -> float | None:
        return self._hits.get("max_score")

    @property
    def shards(self) -> dict[str, Any] | None:
        return self._shards

    @property
    def took(self) -> int | None:
        """Engine-side execution time in milliseconds."""
        return self._took

    @property
    def timed_out(self) -> bool:
        return bool(self._timed_out)

    @property
    def hits(self) -> dict[str, Any]:
        return self._hits

    @property
    def aggregations(self) -> dict[str, Any]:
        return self._aggregations


class IndexableCollection(list, Generic[R]):
    """A list of records of one model type, indexed with single bulk calls."""

    def __init__(self, model: SearchableModel[R], items: Iterable[Indexable[R]] = ()) -> None:
        super().__init__(items)
        self.model = model

    async def add_to_index(self) -> dict[str, Any] | None:
        """Index every record in one bulk request.

        Returns:
            The bulk response, or None when the collection is empty.

        Raises:
            DocumentMissingError: If any record has no persisted identity.
                Raised before any request is made.
        """
        if not self:
            return None

        body: list[dict[str, Any]] = []
        for item in self:
            if not self.model.adapter.exists(item.record):
                raise DocumentMissingError("Document does not exist.")
            body.append({"index": self._action_meta(item)})
            body.append(item.get_index_document_data())

        logger.info("Bulk indexing %d %s documents", len(self), self.model.type_name)
        return await self.model.client.bulk({"body": body})

    async def remove_from_index(self) -> dict[str, Any] | None:
        """Delete every record's document in one bulk request."""
        if not self:
            return None

        body: list[dict[str, Any]] = []
        for item in self:
            if not self.model.adapter.exists(item.record):
                raise DocumentMissingError("Document does not exist.")
            body.append({"delete": self._action_meta(item)})
        logger.info("Bulk removing %d %s documents", len(self), self.model.type_name)
        return await self.model.client.bulk({"body": body})

    async def reindex(self) -> dict[str, Any] | None:
        """Remove, then re-add, every record."""
        await self.remove_from_index()
        return await self.add_to_index()

    def _action_meta(self, item: Indexable[R]) -> dict[str, Any]:
        return {
            "_index": self.model.index_name,
            "_type": self.model.type_name,
            "_id": item.key,
        }
