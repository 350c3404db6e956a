"""SQLAlchemy integration — Record adapter and async record source.

Works with SQLAlchemy 2.x declarative models::

    class Product(Base):
        __tablename__ = "products"

        id: Mapped[int] = mapped_column(primary_key=True)
        name: Mapped[str]

    adapter = SQLAlchemyRecordAdapter(Product)
    source = SQLAlchemyRecordSource(session_factory, Product, relations=["tags"])
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import make_transient_to_detached, selectinload
from sqlalchemy.orm.attributes import set_committed_value

logger = logging.getLogger(__name__)

M = TypeVar("M")

QueryScope = Callable[[Select], Select]


class SQLAlchemyRecordAdapter(Generic[M]):
    """``RecordAdapter`` for a SQLAlchemy mapped class.

    Hydrated instances are built without calling ``__init__`` and their
    column values are set as committed state, so they carry no pending
    changes. Keys that are not mapped at all are set as plain instance
    attributes. Relationship keys are skipped.
    """

    def __init__(self, model_class: type[M]) -> None:
        self.model_class = model_class
        self._mapper = sa_inspect(model_class)
        self._column_keys = {attr.key for attr in self._mapper.column_attrs}
        self._pk_keys = [self._mapper.get_property_by_column(col).key for col in self._mapper.primary_key]

    def get_key(self, record: M) -> Any:
        values = [getattr(record, key) for key in self._pk_keys]
        if any(value is None for value in values):
            return None
        return values[0] if len(values) == 1 else tuple(values)

    def get_table(self) -> str:
        return self._mapper.local_table.name

    def exists(self, record: M) -> bool:
        return self.get_key(record) is not None

    def new_instance(self, attributes: dict[str, Any] | None = None, exists: bool = False) -> M:
        record = self._mapper.class_manager.new_instance()
        self.set_raw_attributes(record, attributes or {}, sync=exists)
        # Detached rather than transient: adding it to a session updates the row
        if exists and self.get_key(record) is not None:
            make_transient_to_detached(record)
        return record

    def set_raw_attributes(self, record: M, attributes: dict[str, Any], sync: bool = False) -> None:
        for key, value in attributes.items():
            if key in self._column_keys:
                if sync:
                    set_committed_value(record, key, value)
                else:
                    setattr(record, key, value)
            elif key in self._mapper.attrs or key.startswith("_sa_"):
                logger.debug("Skipping %s.%s during raw assignment", self.model_class.__name__, key)
            else:
                setattr(record, key, value)

    def to_dict(self, record: M) -> dict[str, Any]:
        return _to_dict(record, include_relations=True)


def _to_dict(record: Any, include_relations: bool) -> dict[str, Any]:
    state = sa_inspect(record)
    mapper = state.mapper
    # Attributes not yet loaded on a persistent instance would trigger IO
    unloaded = state.unloaded if state.has_identity else set()

    data: dict[str, Any] = {
        attr.key: getattr(record, attr.key) for attr in mapper.column_attrs if attr.key not in unloaded
    }
    if not include_relations:
        return data

    for rel in mapper.relationships:
        if rel.key in state.unloaded:
            continue
        value = state.dict.get(rel.key)
        if value is None:
            data[rel.key] = None
        elif rel.uselist:
            data[rel.key] = [_to_dict(item, include_relations=False) for item in value]
        else:
            data[rel.key] = _to_dict(value, include_relations=False)
    return data


class SQLAlchemyRecordSource(Generic[M]):
    """``RecordSource`` over an async session factory.

    Args:
        session_factory: Callable returning an ``AsyncSession`` usable as an
            async context manager (e.g. an ``async_sessionmaker``).
        model_class: The mapped class to page through.
        relations: Relationship names eager-loaded with every page.
        scopes: Callables refining the base ``select()`` statement.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        model_class: type[M],
        *,
        relations: Sequence[str] = (),
        scopes: Sequence[QueryScope] = (),
    ) -> None:
        self._session_factory = session_factory
        self.model_class = model_class
        self.relations = list(relations)
        self.scopes = list(scopes)
        self._mapper = sa_inspect(model_class)

    def statement(self) -> Select:
        """Build the select statement with relations and scopes applied."""
        stmt = select(self.model_class)
        for name in self.relations:
            stmt = stmt.options(selectinload(getattr(self.model_class, name)))
        for scope in self.scopes:
            stmt = scope(stmt)
        return stmt

    async def all(self) -> AsyncIterator[M]:
        async with self._session_factory() as session:
            result = await session.scalars(self.statement())
            for record in result:
                yield record

    async def chunks(self, size: int) -> AsyncIterator[list[M]]:
        if size <= 0:
            raise ValueError(f"Chunk size must be positive, got {size}")

        stmt = self.statement().order_by(*self._mapper.primary_key)
        offset = 0
        async with self._session_factory() as session:
            while True:
                page = list(await session.scalars(stmt.limit(size).offset(offset)))
                if not page:
                    return
                yield page
                if len(page) < size:
                    return
                offset += size
