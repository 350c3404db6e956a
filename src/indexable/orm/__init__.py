"""ORM layer — Record accessors and bulk record sources.

Implement ``RecordAdapter`` (and optionally ``RecordSource``) to index
records from an ORM other than SQLAlchemy.
"""

from indexable.orm.base import RecordAdapter, RecordSource
from indexable.orm.sqlalchemy import SQLAlchemyRecordAdapter, SQLAlchemyRecordSource

__all__ = ["RecordAdapter", "RecordSource", "SQLAlchemyRecordAdapter", "SQLAlchemyRecordSource"]
