"""Document mapper — Records to source bodies and search hits back to records.

Serialization exports ``to_index_document()`` when the model class defines
it, and the ORM attribute snapshot otherwise.

Hydration picks the hit's attribute source in this order:
  1. ``fields`` when the hit carries it, otherwise ``_source``
  2. ``highlight`` entries, overlaid on top and winning over both

Attribute keys are not validated here; the ORM adapter decides what it can
assign.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from indexable.models.document import HitProvenance

if TYPE_CHECKING:
    from indexable.core.indexable import Indexable
    from indexable.core.model import SearchableModel
    from indexable.orm.base import RecordAdapter

logger = logging.getLogger(__name__)

R = TypeVar("R")

EXPORT_HOOK = "to_index_document"


def hit_attributes(hit: dict[str, Any]) -> dict[str, Any]:
    """Merge a hit's ``fields``/``_source`` and ``highlight`` into one mapping."""
    if "fields" in hit and hit["fields"] is not None:
        attributes = dict(hit["fields"])
    else:
        attributes = dict(hit.get("_source") or {})

    attributes.update(hit.get("highlight") or {})
    return attributes


class DocumentMapper(Generic[R]):
    """Converts between records and engine documents for one model type."""

    def __init__(self, adapter: RecordAdapter[R]) -> None:
        self.adapter = adapter

    def serialize(self, record: R) -> dict[str, Any]:
        """Return the attribute mapping sent to the engine for ``record``."""
        export = getattr(record, EXPORT_HOOK, None)
        if callable(export):
            return dict(export())
        return self.adapter.to_dict(record)

    def hydrate(self, hit: dict[str, Any], model: SearchableModel[R]) -> Indexable[R]:
        """Build a clean, already-persisted record from a search hit."""
        from indexable.core.indexable import Indexable

        attributes = hit_attributes(hit)
        record = self.adapter.new_instance(attributes, exists=True)

        return Indexable(record, model, provenance=HitProvenance.from_hit(hit), attributes=attributes)

    def hits_to_items(self, response: dict[str, Any], model: SearchableModel[R]) -> list[Indexable[R]]:
        """Hydrate every hit of a search response, in hit order."""
        hits = (response.get("hits") or {}).get("hits") or []
        logger.debug("Hydrating %d hits for %s", len(hits), self.adapter.get_table())
        return [self.hydrate(hit, model) for hit in hits]
