"""Parameter builder — The minimal request parameters every engine call needs."""

from __future__ import annotations

from typing import Any

from indexable.models.params import ParamOptions


def build_base_params(
    index_name: str,
    type_name: str,
    key: Any = None,
    options: ParamOptions | None = None,
) -> dict[str, Any]:
    """Assemble ``index``/``type`` plus whatever ``options`` ask for.

    Pure: the same arguments always produce an equal dict.

    Args:
        index_name: Resolved index name.
        type_name: Resolved type (category) name.
        key: Record identifier, if a record is involved.
        options: Which optional parameters to add. Defaults to id only.

    Returns:
        A fresh parameter dict.
    """
    options = options or ParamOptions()

    params: dict[str, Any] = {
        "index": index_name,
        "type": type_name,
    }

    if options.include_id and key is not None:
        params["id"] = key

    fields: list[str] = []
    if options.include_source:
        fields.append("_source")
    if options.include_timestamp:
        fields.append("_timestamp")
    if fields:
        params["fields"] = ",".join(fields)

    if options.limit is not None:
        params["size"] = options.limit
    if options.offset is not None:
        params["from"] = options.offset

    return params


def build_index_params(
    index_name: str,
    shards: int | None = None,
    replicas: int | None = None,
    analysis: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Parameters for creating an index; ``body.settings`` only holds what was given."""
    params: dict[str, Any] = {"index": index_name}

    settings: dict[str, Any] = {}
    if shards is not None:
        settings["number_of_shards"] = shards
    if replicas is not None:
        settings["number_of_replicas"] = replicas
    if analysis:
        settings["analysis"] = analysis
    if settings:
        params["body"] = {"settings": settings}

    return params
