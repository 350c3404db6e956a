"""Shared test fixtures and configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from indexable.config.settings import IndexableSettings
from indexable.core.model import SearchableModel
from indexable.orm.sqlalchemy import SQLAlchemyRecordAdapter
from sample_models import Product

# ── Fixtures ─────────────────────────────────────────────────────────────────


@pytest.fixture
def root_logger() -> Iterator[logging.Logger]:
    """Root logger whose handlers and level are restored after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.fixture
def settings() -> IndexableSettings:
    """Create a test settings instance with defaults."""
    return IndexableSettings(
        _env_file=None,  # type: ignore[call-arg]
        default_index="catalog",
    )


@pytest.fixture
def engine() -> MagicMock:
    """Engine client double: every call is an ``AsyncMock`` returning ``{}``."""
    client = MagicMock()
    for name in ("index", "delete", "get", "search", "bulk", "close"):
        setattr(client, name, AsyncMock(return_value={}))
    client.indices = MagicMock()
    for name in ("exists", "create", "delete", "get_mapping", "put_mapping", "delete_mapping", "optimize"):
        setattr(client.indices, name, AsyncMock(return_value={}))
    return client


@pytest.fixture
def adapter() -> SQLAlchemyRecordAdapter[Product]:
    return SQLAlchemyRecordAdapter(Product)


@pytest.fixture
def products(adapter: SQLAlchemyRecordAdapter[Product], engine: MagicMock) -> SearchableModel[Product]:
    return SearchableModel(adapter, engine, mapping_properties={"name": {"type": "text"}})


@pytest.fixture
def product() -> Product:
    return Product(id=7, name="Desk Lamp", price=24.5)


@pytest.fixture
def search_response() -> dict[str, Any]:
    """Search response with two hits, the second one highlighted."""
    return {
        "took": 3,
        "timed_out": False,
        "_shards": {"total": 1, "successful": 1, "skipped": 0, "failed": 0},
        "hits": {
            "total": 42,
            "max_score": 1.3,
            "hits": [
                {
                    "_index": "default",
                    "_id": "2",
                    "_score": 1.3,
                    "_version": 4,
                    "_source": {"id": 2, "name": "Floor Lamp", "price": 80.0},
                },
                {
                    "_index": "default",
                    "_id": "1",
                    "_score": 0.7,
                    "_source": {"id": 1, "name": "Desk Lamp", "price": 24.5},
                    "highlight": {"name": ["Desk <em>Lamp</em>"]},
                },
            ],
        },
    }
