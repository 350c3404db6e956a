"""CLI entry point for index and mapping administration."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from indexable.config.settings import IndexableSettings
    from indexable.core.model import SearchableModel
    from indexable.engine.base.client import EngineClient

_MAPPING_COMMANDS = ("get-mapping", "put-mapping", "delete-mapping", "rebuild-mapping")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="indexable",
        description="Indexable — search index administration for ORM models",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--index",
        "-i",
        type=str,
        default=None,
        help="Index name (overrides config default_index)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"indexable {_get_version()}",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("index-exists", help="Print whether the index exists")

    create = commands.add_parser("create-index", help="Create the index")
    create.add_argument("--shards", type=int, default=None, help="Number of primary shards")
    create.add_argument("--replicas", type=int, default=None, help="Number of replicas")

    commands.add_parser("delete-index", help="Delete the index")

    optimize = commands.add_parser("optimize", help="Merge index segments")
    optimize.add_argument("--max-num-segments", type=int, default=None, help="Target segment count")

    for name in _MAPPING_COMMANDS:
        sub = commands.add_parser(name, help=f"{name.replace('-', ' ').capitalize()} of a model")
        sub.add_argument(
            "target",
            help="'module:attribute' naming a SearchableModel, or a factory taking (client, settings)",
        )
        if name == "put-mapping":
            sub.add_argument("--ignore-conflicts", action="store_true", help="Ask the engine to ignore conflicts")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    from indexable.config.settings import IndexableSettings
    from indexable.observability.logging import setup_logging

    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: Config file not found: {config_path}", file=sys.stderr)
            sys.exit(1)
        settings = IndexableSettings.from_yaml(config_path)
    else:
        settings = IndexableSettings()

    if args.index:
        settings.default_index = args.index
    if args.log_level:
        settings.observability.log_level = args.log_level

    setup_logging(settings.observability)

    from elasticsearch import ApiError

    from indexable.engine.base.exceptions import IndexableError

    try:
        result = asyncio.run(_run(args, settings))
    except (IndexableError, ApiError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2, default=str))


async def _run(args: argparse.Namespace, settings: IndexableSettings) -> Any:
    from indexable.core.params import build_index_params
    from indexable.engine.elasticsearch.gateway import ElasticsearchGateway

    async with ElasticsearchGateway.from_settings(settings.client) as client:
        index = settings.default_index

        if args.command == "index-exists":
            return {"index": index, "exists": await client.indices.exists({"index": index})}
        if args.command == "create-index":
            return await client.indices.create(build_index_params(index, args.shards, args.replicas))
        if args.command == "delete-index":
            return await client.indices.delete({"index": index})
        if args.command == "optimize":
            params: dict[str, Any] = {"index": index}
            if args.max_num_segments is not None:
                params["max_num_segments"] = args.max_num_segments
            return await client.indices.optimize(params)

        model = resolve_target(args.target, client, settings)
        if args.command == "get-mapping":
            return await model.get_mapping()
        if args.command == "put-mapping":
            return await model.put_mapping(ignore_conflicts=args.ignore_conflicts)
        if args.command == "delete-mapping":
            return await model.delete_mapping()
        return await model.rebuild_mapping()


def resolve_target(target: str, client: EngineClient, settings: IndexableSettings) -> SearchableModel[Any]:
    """Resolve ``module:attribute`` to a ``SearchableModel``.

    The attribute may be a model instance or a callable that builds one from
    ``(client, settings)``.

    Raises:
        ConfigurationError: If the target cannot be imported or resolved.
    """
    from indexable.core.model import SearchableModel
    from indexable.engine.base.exceptions import ConfigurationError

    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(f"Target must look like 'module:attribute', got '{target}'")

    try:
        module = importlib.import_module(module_name)
        obj = getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot resolve target '{target}': {e}") from e

    if isinstance(obj, SearchableModel):
        return obj
    if callable(obj):
        built = obj(client, settings)
        if isinstance(built, SearchableModel):
            return built
    raise ConfigurationError(f"Target '{target}' is not a SearchableModel or a factory for one")


def _get_version() -> str:
    """Get the package version."""
    try:
        from indexable import __version__

        return __version__
    except ImportError:
        return "unknown"


if __name__ == "__main__":
    main()
