"""Indexable — Index, search and hydrate ORM records with Elasticsearch.

Quick start::

    from indexable import ElasticsearchGateway, IndexableSettings, SearchableModel
    from indexable.orm import SQLAlchemyRecordAdapter

    settings = IndexableSettings()
    engine = ElasticsearchGateway.from_settings(settings.client)
    products = SearchableModel.from_settings(SQLAlchemyRecordAdapter(Product), engine, settings)

    await products.wrap(lamp).add_to_index()
    page = await products.search("lamp")
    for item in page:
        print(item.record.name, item.document_score)
"""

from indexable.config.settings import IndexableSettings
from indexable.core.collection import IndexableCollection, ResultCollection
from indexable.core.indexable import Indexable
from indexable.core.model import SearchableModel
from indexable.engine.base.exceptions import (
    ConfigurationError,
    DocumentMissingError,
    EngineUnavailableError,
    IndexableError,
)
from indexable.engine.elasticsearch.gateway import ElasticsearchGateway

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DocumentMissingError",
    "ElasticsearchGateway",
    "EngineUnavailableError",
    "Indexable",
    "IndexableCollection",
    "IndexableError",
    "IndexableSettings",
    "ResultCollection",
    "SearchableModel",
]
