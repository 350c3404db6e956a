"""ORM contract — What the core needs from the persistence layer.

The core never creates, saves or deletes records. It reads keys and
attributes, builds fresh instances while hydrating search hits, and pages
through all records of a model for bulk indexing.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Protocol, TypeVar, runtime_checkable

R = TypeVar("R")


@runtime_checkable
class RecordAdapter(Protocol[R]):
    """Accessors for one record type."""

    def get_key(self, record: R) -> Any:
        """Return the record identifier, or None when it has none yet."""
        ...

    def get_table(self) -> str:
        """Return the storage name of the record type."""
        ...

    def exists(self, record: R) -> bool:
        """Return whether the record has a persisted identity."""
        ...

    def new_instance(self, attributes: dict[str, Any] | None = None, exists: bool = False) -> R:
        """Create a record. ``exists=True`` marks it as already-persisted data."""
        ...

    def set_raw_attributes(self, record: R, attributes: dict[str, Any], sync: bool = False) -> None:
        """Assign attributes without validation. ``sync=True`` leaves the record clean."""
        ...

    def to_dict(self, record: R) -> dict[str, Any]:
        """Return the record's current attributes."""
        ...


@runtime_checkable
class RecordSource(Protocol[R]):
    """Iterates over every record of a model type."""

    def all(self) -> AsyncIterator[R]:
        """Yield all records."""
        ...

    def chunks(self, size: int) -> AsyncIterator[list[R]]:
        """Yield records in pages of at most ``size``."""
        ...
