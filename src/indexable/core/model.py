"""Searchable model — The per-model-type facade over the search engine.

One ``SearchableModel`` is built per model type and reused. It owns the
model's index name, mapping schema and engine client, and offers:

  - Search: ``search``, ``search_by_query``, ``search_custom``
  - Administration: index and mapping lifecycle, existence checks, optimize
  - Bulk indexing: ``add_all_to_index`` and ``reindex`` over a record source
  - Record binding: ``wrap`` and ``new_collection``

Example::

    products = SearchableModel(
        SQLAlchemyRecordAdapter(Product),
        ElasticsearchGateway.from_settings(settings.client),
        index_name=settings.default_index,
        mapping_properties={"name": {"type": "text"}},
    )
    await products.wrap(lamp).add_to_index()
    page = await products.search("lamp", limit=10)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from contextlib import aclosing
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from indexable.core.collection import IndexableCollection, ResultCollection
from indexable.core.indexable import Indexable
from indexable.core.mapper import DocumentMapper
from indexable.core.params import build_base_params, build_index_params
from indexable.engine.base.exceptions import ConfigurationError
from indexable.models.params import ParamOptions

if TYPE_CHECKING:
    from indexable.config.settings import IndexableSettings
    from indexable.engine.base.client import EngineClient
    from indexable.orm.base import RecordAdapter, RecordSource

logger = logging.getLogger(__name__)

R = TypeVar("R")

PageOperation = Callable[[IndexableCollection[R]], Awaitable[dict[str, Any] | None]]


class SearchableModel(Generic[R]):
    """Search engine facade for one record type.

    Args:
        adapter: ORM accessors for the record type.
        client: Engine client used for every call.
        index_name: Index holding this type's documents.
        mapping_properties: Field name to field-definition options.
        source: Record source for bulk operations.
        uses_timestamps_in_index: Whether searches request ``_timestamp``.
    """

    def __init__(
        self,
        adapter: RecordAdapter[R],
        client: EngineClient,
        *,
        index_name: str = "default",
        mapping_properties: dict[str, Any] | None = None,
        source: RecordSource[R] | None = None,
        uses_timestamps_in_index: bool = True,
    ) -> None:
        self.adapter = adapter
        self.client = client
        self.index_name = index_name
        self.mapping_properties: dict[str, Any] = dict(mapping_properties or {})
        self.source = source
        self.mapper: DocumentMapper[R] = DocumentMapper(adapter)
        self._uses_timestamps_in_index = uses_timestamps_in_index

    @classmethod
    def from_settings(
        cls,
        adapter: RecordAdapter[R],
        client: EngineClient,
        settings: IndexableSettings,
        **kwargs: Any,
    ) -> SearchableModel[R]:
        """Build a model facade using the configured default index."""
        kwargs.setdefault("index_name", settings.default_index)
        return cls(adapter, client, **kwargs)

    def __repr__(self) -> str:
        return f"SearchableModel(index={self.index_name!r}, type={self.type_name!r})"

    @property
    def type_name(self) -> str:
        return self.adapter.get_table()

    # ── Timestamps ───────────────────────────────────────────────────────

    def uses_timestamps_in_index(self) -> bool:
        return self._uses_timestamps_in_index

    def use_timestamps_in_index(self) -> None:
        self._uses_timestamps_in_index = True

    def dont_use_timestamps_in_index(self) -> None:
        self._uses_timestamps_in_index = False

    # ── Records ──────────────────────────────────────────────────────────

    def document_key(self, record: R) -> Any:
        """The document id for ``record``: its key, with composite keys joined by ':'."""
        key = self.adapter.get_key(record)
        if isinstance(key, tuple):
            return ":".join(str(part) for part in key)
        return key

    def wrap(self, record: R) -> Indexable[R]:
        return Indexable(record, self)

    def new_collection(self, records: Iterable[R] = ()) -> IndexableCollection[R]:
        return IndexableCollection(self, (self.wrap(record) for record in records))

    def base_params(
        self,
        record: R | None = None,
        *,
        include_id: bool = True,
        include_source: bool = False,
        include_timestamp: bool = False,
        limit: Any = None,
        offset: Any = None,
    ) -> dict[str, Any]:
        """Build the basic parameters most engine calls need."""
        key = self.document_key(record) if record is not None else None
        options = ParamOptions(
            include_id=include_id,
            include_source=include_source,
            include_timestamp=include_timestamp,
            limit=limit,
            offset=offset,
        )
        return build_base_params(self.index_name, self.type_name, key, options)

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, term: str | None = None, limit: Any = None, offset: Any = None) -> ResultCollection[R]:
        """Simple free-text search across all fields.

        Args:
            term: Text to match.
            limit: Page size.
            offset: Page start.
        """
        params = self.base_params(include_id=True, limit=limit, offset=offset)
        params["body"] = {"query": {"multi_match": {"query": term, "fields": ["*"], "lenient": True}}}
        return await self._execute_search(params)

    async def search_by_query(
        self,
        query: dict[str, Any] | None = None,
        aggregations: dict[str, Any] | None = None,
        source_fields: list[str] | None = None,
        limit: Any = None,
        offset: Any = None,
        sort: list[Any] | dict[str, Any] | None = None,
    ) -> ResultCollection[R]:
        """Search with a structured query body.

        Each of ``source_fields``, ``query``, ``aggregations`` and ``sort`` is
        added to the body only when given; otherwise the engine default applies.
        """
        params = self.base_params(
            include_id=True,
            include_source=True,
            include_timestamp=self._uses_timestamps_in_index,
            limit=limit,
            offset=offset,
        )

        body: dict[str, Any] = {}
        if source_fields:
            body["_source"] = {"include": list(source_fields)}
        if query:
            body["query"] = query
        if aggregations:
            body["aggs"] = aggregations
        if sort:
            body["sort"] = sort
        if body:
            params["body"] = body

        return await self._execute_search(params)

    async def search_custom(
        self,
        params: dict[str, Any] | None = None,
        limit: Any = None,
        offset: Any = None,
    ) -> ResultCollection[R]:
        """Search with caller-built parameters.

        Caller parameters are merged over the basic ones and win on key
        collisions.
        """
        merged = self.base_params(
            include_id=True,
            include_source=True,
            include_timestamp=self._uses_timestamps_in_index,
            limit=limit,
            offset=offset,
        )
        merged.update(params or {})
        return await self._execute_search(merged)

    async def _execute_search(self, params: dict[str, Any]) -> ResultCollection[R]:
        logger.debug("Searching %s/%s", params.get("index"), params.get("type"))
        response = await self.client.search(params)
        return ResultCollection(self.mapper.hits_to_items(response, self), response)

    # ── Index administration ─────────────────────────────────────────────

    async def index_exists(self) -> bool:
        return await self.client.indices.exists({"index": self.index_name})

    async def type_exists(self) -> bool:
        return await self.client.indices.exists(self.base_params())

    async def create_index(
        self,
        shards: int | None = None,
        replicas: int | None = None,
        analysis: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create the index, with optional shard, replica and analysis settings."""
        logger.info("Creating index %s", self.index_name)
        return await self.client.indices.create(build_index_params(self.index_name, shards, replicas, analysis))

    async def delete_index(self) -> dict[str, Any]:
        logger.info("Deleting index %s", self.index_name)
        return await self.client.indices.delete({"index": self.index_name})

    async def optimize(self, params: dict[str, Any] | None = None) -> dict[str, Any]:
        merged: dict[str, Any] = {"index": self.index_name}
        merged.update(params or {})
        return await self.client.indices.optimize(merged)

    # ── Mapping administration ───────────────────────────────────────────

    async def mapping_exists(self) -> bool:
        mapping = await self.get_mapping()
        return any(isinstance(entry, dict) and entry.get("mappings") for entry in mapping.values())

    async def get_mapping(self) -> dict[str, Any]:
        return await self.client.indices.get_mapping(self.base_params())

    async def put_mapping(self, ignore_conflicts: bool = False) -> dict[str, Any]:
        params = self.base_params()
        params["body"] = {
            self.type_name: {
                "_source": {"enabled": True},
                "properties": self.mapping_properties,
            }
        }
        params["ignore_conflicts"] = ignore_conflicts

        logger.info("Putting mapping for %s/%s", self.index_name, self.type_name)
        return await self.client.indices.put_mapping(params)

    async def delete_mapping(self) -> dict[str, Any]:
        logger.info("Deleting mapping for %s/%s", self.index_name, self.type_name)
        return await self.client.indices.delete_mapping(self.base_params())

    async def rebuild_mapping(self) -> dict[str, Any]:
        """Delete the mapping if it exists, then put it again."""
        if await self.mapping_exists():
            await self.delete_mapping()

        # Nothing left to conflict with
        return await self.put_mapping()

    # ── Bulk indexing ────────────────────────────────────────────────────

    async def add_all_to_index(self, chunk: int = 0) -> list[dict[str, Any] | None]:
        """Index every record from the source.

        Args:
            chunk: Page size. ``0`` loads all records into one bulk request.

        Returns:
            One bulk response per page.
        """
        return await self._each_page(chunk, IndexableCollection.add_to_index)

    async def reindex(self, chunk: int = 0) -> list[dict[str, Any] | None]:
        """Remove and re-add every record from the source, page by page."""
        return await self._each_page(chunk, IndexableCollection.reindex)

    async def _each_page(self, chunk: int, operation: PageOperation[R]) -> list[dict[str, Any] | None]:
        if self.source is None:
            raise ConfigurationError(f"{self!r} has no record source for bulk operations.")

        responses: list[dict[str, Any] | None] = []
        if chunk:
            async with aclosing(self.source.chunks(chunk)) as pages:
                async for page in pages:
                    logger.info("Processing page %d of %s (%d records)", len(responses) + 1, self.type_name, len(page))
                    responses.append(await operation(self.new_collection(page)))
        else:
            records = [record async for record in self.source.all()]
            responses.append(await operation(self.new_collection(records)))
        return responses
