"""Elasticsearch gateway — ``EngineClient`` over ``AsyncElasticsearch`` (8.x).

The core speaks the classic parameter-map dialect (``index``/``type``/``id``/
``body``/``fields``/``size``/``from``). Current Elasticsearch releases keep a
single mapping per index, so this gateway translates on the way out:

  - ``type`` is logical only and is never sent.
  - ``size``/``from`` move into the search body.
  - ``fields`` only decides whether ``_source`` is fetched.
  - ``put_mapping`` bodies are unwrapped from their type key.
  - ``delete_mapping`` recreates the index empty, keeping its shard,
    replica and analysis settings.
  - ``optimize`` maps to ``forcemerge``.

Transport-level failures become ``EngineUnavailableError``. Errors returned by
the engine (``elasticsearch.ApiError``) pass through untouched.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from elastic_transport import TransportError
from elasticsearch import AsyncElasticsearch

from indexable.engine.base.client import EngineClient, IndicesClient, Params, Response
from indexable.engine.base.exceptions import EngineUnavailableError

if TYPE_CHECKING:
    from indexable.config.settings import ClientSettings

logger = logging.getLogger(__name__)

_KEPT_INDEX_SETTINGS = ("number_of_shards", "number_of_replicas", "analysis")


def _body(response: Any) -> Any:
    """Unwrap an ``ApiResponse`` to its decoded body."""
    return getattr(response, "body", response)


async def _call(operation: str, fn: Callable[..., Awaitable[Any]], **kwargs: Any) -> Any:
    try:
        response = await fn(**kwargs)
    except TransportError as e:
        raise EngineUnavailableError(f"Elasticsearch {operation} failed: {e}") from e
    return _body(response)


def _wants_source(params: Params) -> bool | None:
    fields = params.get("fields")
    if not fields:
        return None
    return "_source" in str(fields).split(",")


class ElasticsearchIndices(IndicesClient):
    """Administrative calls routed to ``AsyncElasticsearch.indices``."""

    def __init__(self, client: AsyncElasticsearch) -> None:
        self._client = client

    async def exists(self, params: Params) -> bool:
        result = await _call("indices.exists", self._client.indices.exists, index=params["index"])
        return bool(result)

    async def create(self, params: Params) -> Response:
        kwargs: dict[str, Any] = {"index": params["index"]}
        if params.get("body"):
            kwargs["body"] = params["body"]
        logger.info("Creating index %s", params["index"])
        return await _call("indices.create", self._client.indices.create, **kwargs)

    async def delete(self, params: Params) -> Response:
        logger.info("Deleting index %s", params["index"])
        return await _call("indices.delete", self._client.indices.delete, index=params["index"])

    async def get_mapping(self, params: Params) -> Response:
        return await _call("indices.get_mapping", self._client.indices.get_mapping, index=params["index"])

    async def put_mapping(self, params: Params) -> Response:
        body = dict(params.get("body") or {})
        type_name = params.get("type")
        if type_name and type_name in body:
            body = body[type_name]
        if params.get("ignore_conflicts"):
            logger.debug("ignore_conflicts is not supported by this engine version; ignoring")
        return await _call("indices.put_mapping", self._client.indices.put_mapping, index=params["index"], body=body)

    async def delete_mapping(self, params: Params) -> Response:
        index = params["index"]
        current = await _call("indices.get_settings", self._client.indices.get_settings, index=index)
        index_settings = current.get(index, {}).get("settings", {}).get("index", {})
        kept = {key: index_settings[key] for key in _KEPT_INDEX_SETTINGS if key in index_settings}

        logger.info("Dropping mapping of %s by recreating the index", index)
        await _call("indices.delete", self._client.indices.delete, index=index)
        kwargs: dict[str, Any] = {"index": index}
        if kept:
            kwargs["body"] = {"settings": kept}
        return await _call("indices.create", self._client.indices.create, **kwargs)

    async def optimize(self, params: Params) -> Response:
        kwargs = {key: value for key, value in params.items() if key != "type"}
        return await _call("indices.forcemerge", self._client.indices.forcemerge, **kwargs)


class ElasticsearchGateway(EngineClient):
    """Engine client backed by the official ``elasticsearch`` async client.

    Args:
        client: A configured ``AsyncElasticsearch`` instance.

    Example::

        async with ElasticsearchGateway.from_settings(settings.client) as engine:
            products = SearchableModel(SQLAlchemyRecordAdapter(Product), engine)
            page = await products.search("lamp")
    """

    def __init__(self, client: AsyncElasticsearch) -> None:
        self._client = client
        self._indices = ElasticsearchIndices(client)

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> ElasticsearchGateway:
        """Build a gateway from connection settings."""
        client_kwargs: dict[str, Any] = {
            "hosts": settings.hosts,
            "verify_certs": settings.verify_certs,
            "request_timeout": settings.request_timeout,
        }
        if settings.username and settings.password:
            client_kwargs["basic_auth"] = (settings.username, settings.password)
        if settings.api_key:
            client_kwargs["api_key"] = settings.api_key

        client_kwargs.update(settings.extra)
        logger.debug("Creating Elasticsearch client for %s", settings.hosts)
        return cls(AsyncElasticsearch(**client_kwargs))

    async def __aenter__(self) -> ElasticsearchGateway:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    @property
    def indices(self) -> ElasticsearchIndices:
        return self._indices

    # ── Documents ────────────────────────────────────────────────────────

    async def index(self, params: Params) -> Response:
        return await _call(
            "index",
            self._client.index,
            index=params["index"],
            id=params.get("id"),
            document=params.get("body") or {},
        )

    async def delete(self, params: Params) -> Response:
        return await _call("delete", self._client.delete, index=params["index"], id=params["id"])

    async def get(self, params: Params) -> Response:
        kwargs: dict[str, Any] = {"index": params["index"], "id": params["id"]}
        source = _wants_source(params)
        if source is not None:
            kwargs["source"] = source
        return await _call("get", self._client.get, **kwargs)

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self, params: Params) -> Response:
        body = dict(params.get("body") or {})
        if "size" in params:
            body["size"] = params["size"]
        if "from" in params:
            body["from"] = params["from"]
        return await _call("search", self._client.search, index=params["index"], body=body)

    async def bulk(self, params: Params) -> Response:
        # Action lines alternate with source lines, except for deletes
        lines = iter(params.get("body") or [])
        operations: list[dict[str, Any]] = []
        for action_line in lines:
            action, meta = next(iter(action_line.items()))
            operations.append({action: {key: value for key, value in meta.items() if key != "_type"}})
            if action != "delete":
                operations.append(next(lines))
        return await _call("bulk", self._client.bulk, operations=operations)
