"""Indexable — A record bound to its model's search index.

Wraps one ORM record together with the ``SearchableModel`` of its type and
adds the document-level operations: index, remove, fetch. Records hydrated
from search hits also carry the hit's score and version.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from indexable.engine.base.exceptions import DocumentMissingError
from indexable.models.document import DocumentDescriptor, HitProvenance

if TYPE_CHECKING:
    from indexable.core.model import SearchableModel

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Indexable(Generic[R]):
    """A record plus its search-side identity.

    Attributes:
        record: The wrapped ORM record.
        model: The model facade owning index name, client and mapper.
        attributes: The raw attribute mapping a hydrated record was built
            from (empty for records that did not come from a hit).
    """

    def __init__(
        self,
        record: R,
        model: SearchableModel[R],
        *,
        provenance: HitProvenance | None = None,
        attributes: dict[str, Any] | None = None,
    ) -> None:
        self.record = record
        self.model = model
        self._provenance = provenance or HitProvenance()
        self.attributes = attributes or {}

    def __repr__(self) -> str:
        return f"Indexable({self.model.type_name}, key={self.key!r}, is_document={self.is_document})"

    @property
    def key(self) -> Any:
        return self.model.document_key(self.record)

    # ── Hit provenance ───────────────────────────────────────────────────

    @property
    def is_document(self) -> bool:
        """Whether this record was populated from a search hit."""
        return self._provenance.is_document

    @property
    def document_score(self) -> float | None:
        return self._provenance.score

    @property
    def document_version(self) -> int | None:
        return self._provenance.version

    # ── Document data ────────────────────────────────────────────────────

    def get_index_document_data(self) -> dict[str, Any]:
        """The data the engine will index for this record."""
        return self.model.mapper.serialize(self.record)

    def descriptor(self) -> DocumentDescriptor:
        """Describe the document this record maps to.

        Raises:
            DocumentMissingError: If the record has no key yet.
        """
        key = self._require_key()
        return DocumentDescriptor(
            index=self.model.index_name,
            type=self.model.type_name,
            id=str(key),
            body=self.get_index_document_data(),
        )

    # ── Engine operations ────────────────────────────────────────────────

    async def add_to_index(self) -> dict[str, Any]:
        """Index (create or replace) this record's document.

        Raises:
            DocumentMissingError: If the record has no persisted identity.
        """
        key = self._require_key()
        params = self.model.base_params(self.record)
        params["body"] = self.get_index_document_data()
        # The document id always mirrors the record key, whatever generates it
        params["id"] = key

        logger.debug("Indexing %s/%s/%s", params["index"], params["type"], key)
        return await self.model.client.index(params)

    async def remove_from_index(self) -> dict[str, Any]:
        """Delete this record's document.

        Raises:
            DocumentMissingError: If the record has no persisted identity.
        """
        key = self._require_key()
        params = self.model.base_params(self.record)
        logger.debug("Removing %s/%s/%s", params["index"], params["type"], key)
        return await self.model.client.delete(params)

    async def get_indexed_document(self) -> dict[str, Any]:
        """Fetch this record's document as stored by the engine."""
        self._require_key()
        return await self.model.client.get(self.model.base_params(self.record))

    def _require_key(self) -> Any:
        if not self.model.adapter.exists(self.record):
            raise DocumentMissingError("Document does not exist.")
        return self.key
