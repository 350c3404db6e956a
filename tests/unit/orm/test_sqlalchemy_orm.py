"""Tests for the SQLAlchemy record adapter and record source."""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import MagicMock

import pytest
from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from indexable.core.model import SearchableModel
from indexable.engine.base.exceptions import EngineUnavailableError
from indexable.orm.base import RecordAdapter, RecordSource
from indexable.orm.sqlalchemy import SQLAlchemyRecordAdapter, SQLAlchemyRecordSource
from sample_models import Base, Listing, Product, Tag


@pytest.fixture
async def session_factory() -> AsyncIterator[async_sessionmaker]:
    """In-memory SQLite database seeded with five products."""
    db = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with db.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(db, expire_on_commit=False)
    async with factory() as session:
        session.add_all(
            [Product(id=i, name=f"Lamp {i}", price=10.0 * i, tags=[Tag(id=i, label=f"tag-{i}")]) for i in range(1, 6)]
        )
        await session.commit()

    yield factory
    await db.dispose()


# ── Record adapter ───────────────────────────────────────────────────────────


class TestRecordAdapter:
    def test_satisfies_protocol(self, adapter: SQLAlchemyRecordAdapter) -> None:
        assert isinstance(adapter, RecordAdapter)

    def test_get_key(self, adapter: SQLAlchemyRecordAdapter, product: Product) -> None:
        assert adapter.get_key(product) == 7
        assert adapter.get_key(Product(name="Unsaved")) is None

    def test_composite_key(self) -> None:
        listings = SQLAlchemyRecordAdapter(Listing)
        assert listings.get_key(Listing(shop="north", sku="LMP-1")) == ("north", "LMP-1")
        assert listings.get_key(Listing(shop="north")) is None

    def test_get_table(self, adapter: SQLAlchemyRecordAdapter) -> None:
        assert adapter.get_table() == "products"

    def test_exists(self, adapter: SQLAlchemyRecordAdapter, product: Product) -> None:
        assert adapter.exists(product) is True
        assert adapter.exists(Product(name="Unsaved")) is False

    def test_new_instance_clean(self, adapter: SQLAlchemyRecordAdapter) -> None:
        record = adapter.new_instance({"id": 3, "name": "Desk Lamp"}, exists=True)
        assert record.name == "Desk Lamp"
        assert not sa_inspect(record).modified
        assert sa_inspect(record).detached

    def test_new_instance_without_key_stays_transient(self, adapter: SQLAlchemyRecordAdapter) -> None:
        record = adapter.new_instance({"name": "Desk Lamp"}, exists=True)
        assert sa_inspect(record).transient

    def test_new_instance_dirty(self, adapter: SQLAlchemyRecordAdapter) -> None:
        record = adapter.new_instance({"id": 3, "name": "Desk Lamp"})
        assert sa_inspect(record).modified
        assert sa_inspect(record).transient

    def test_to_dict_columns(self, adapter: SQLAlchemyRecordAdapter, product: Product) -> None:
        assert adapter.to_dict(product) == {"id": 7, "name": "Desk Lamp", "price": 24.5}


# ── Record source ────────────────────────────────────────────────────────────


class TestRecordSource:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(SQLAlchemyRecordSource(MagicMock(), Product), RecordSource)

    async def test_all(self, session_factory: async_sessionmaker) -> None:
        source = SQLAlchemyRecordSource(session_factory, Product)
        records = [record async for record in source.all()]
        assert sorted(record.id for record in records) == [1, 2, 3, 4, 5]

    async def test_chunks(self, session_factory: async_sessionmaker) -> None:
        source = SQLAlchemyRecordSource(session_factory, Product)
        pages = [[record.id for record in page] async for page in source.chunks(2)]
        assert pages == [[1, 2], [3, 4], [5]]

    async def test_chunk_size_must_be_positive(self, session_factory: async_sessionmaker) -> None:
        source = SQLAlchemyRecordSource(session_factory, Product)
        with pytest.raises(ValueError):
            async for _ in source.chunks(0):
                pass

    async def test_scopes(self, session_factory: async_sessionmaker) -> None:
        source = SQLAlchemyRecordSource(session_factory, Product, scopes=[lambda stmt: stmt.where(Product.id > 2)])
        records = [record async for record in source.all()]
        assert sorted(record.id for record in records) == [3, 4, 5]

    async def test_relations_are_exported(self, session_factory: async_sessionmaker) -> None:
        adapter = SQLAlchemyRecordAdapter(Product)
        source = SQLAlchemyRecordSource(session_factory, Product, relations=["tags"])
        [record] = [r async for r in source.all() if r.id == 1]
        assert adapter.to_dict(record)["tags"] == [{"id": 1, "label": "tag-1", "product_id": 1}]

    async def test_unloaded_relations_are_skipped(self, session_factory: async_sessionmaker) -> None:
        adapter = SQLAlchemyRecordAdapter(Product)
        source = SQLAlchemyRecordSource(session_factory, Product)
        [record] = [r async for r in source.all() if r.id == 1]
        assert "tags" not in adapter.to_dict(record)


# ── Bulk indexing through a source ───────────────────────────────────────────


class TestBulkIndexing:
    @pytest.fixture
    def model(self, session_factory: async_sessionmaker, engine: MagicMock) -> SearchableModel:
        return SearchableModel(
            SQLAlchemyRecordAdapter(Product),
            engine,
            source=SQLAlchemyRecordSource(session_factory, Product),
        )

    async def test_add_all_in_one_request(self, model: SearchableModel, engine: MagicMock) -> None:
        responses = await model.add_all_to_index()
        assert len(responses) == 1
        body = engine.bulk.await_args.args[0]["body"]
        assert len(body) == 10

    async def test_add_all_chunked(self, model: SearchableModel, engine: MagicMock) -> None:
        responses = await model.add_all_to_index(chunk=2)
        assert len(responses) == 3
        ids = [call.args[0]["body"][0]["index"]["_id"] for call in engine.bulk.await_args_list]
        assert ids == [1, 3, 5]

    async def test_reindex_chunked(self, model: SearchableModel, engine: MagicMock) -> None:
        await model.reindex(chunk=2)
        assert engine.bulk.await_count == 6

    async def test_first_failure_aborts(self, model: SearchableModel, engine: MagicMock) -> None:
        engine.bulk.side_effect = [{"errors": False}, EngineUnavailableError("connection reset")]
        with pytest.raises(EngineUnavailableError):
            await model.add_all_to_index(chunk=2)
        assert engine.bulk.await_count == 2


# ── Saving hydrated records ──────────────────────────────────────────────────


class TestHydratedRecordsSave:
    async def test_save_updates_existing_row(
        self, session_factory: async_sessionmaker, products: SearchableModel, engine: MagicMock
    ) -> None:
        engine.search.return_value = {"hits": {"hits": [{"_id": "1", "_source": {"id": 1, "name": "Lamp"}}]}}
        page = await products.search("lamp")
        record = page[0].record
        record.name = "Renamed"

        async with session_factory() as session:
            session.add(record)
            await session.commit()

        async with session_factory() as session:
            rows = (await session.scalars(select(Product).order_by(Product.id))).all()
        assert len(rows) == 5
        assert rows[0].name == "Renamed"
        assert rows[0].price == 10.0
