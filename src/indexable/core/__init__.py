from indexable.core.collection import IndexableCollection, ResultCollection
from indexable.core.indexable import Indexable
from indexable.core.mapper import DocumentMapper
from indexable.core.model import SearchableModel
from indexable.core.params import build_base_params, build_index_params

__all__ = [
    "DocumentMapper",
    "Indexable",
    "IndexableCollection",
    "ResultCollection",
    "SearchableModel",
    "build_base_params",
    "build_index_params",
]
