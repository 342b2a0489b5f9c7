"""
Document Cache — previously parsed resumes, reusable without re-upload

Persisted layout: one JSON array under a single well-known key
(`savedResumes` by default) in the durable key-value store:

    [{"id": ..., "name": ..., "uploadDate": ..., "data": {...}}, ...]

Invariants:
  - Insertion order is preserved.
  - The in-memory list and the persisted block move in lockstep: a mutation
    either persists the whole updated list or raises CachePersistenceError
    and rolls the in-memory list back.
  - Ids combine a millisecond clock with a random suffix and are re-drawn
    if they collide with an id already in the collection.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from intervita.core.errors import CacheSerializationError
from intervita.schemas.documents import StoredDocument
from intervita.storage.durable import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CACHE_KEY = "savedResumes"

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_document_id() -> str:
    """`<epoch-ms base36>-<8 random base36 chars>`"""
    clock = _to_base36(time.time_ns() // 1_000_000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(8))
    return f"{clock}-{suffix}"


class DocumentCache:
    """
    Owns the in-memory collection for one view of the durable store.

    Construction (or `reload()`) re-reads the persisted block; create a new
    instance whenever the owning view is re-initialised.
    """

    def __init__(self, store: KeyValueStore, key: str = DEFAULT_CACHE_KEY) -> None:
        self._store = store
        self._key   = key
        self._documents: list[StoredDocument] = []
        self.reload()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def reload(self) -> list[StoredDocument]:
        self._documents = self._read_block()
        return self.list()

    def list(self) -> list[StoredDocument]:
        return list(self._documents)

    def load(self, document_id: str) -> dict[str, Any] | None:
        """Data of the first record with this id, or None."""
        for doc in self._documents:
            if doc.id == document_id:
                return doc.data
        return None

    def get(self, document_id: str) -> StoredDocument | None:
        return next((d for d in self._documents if d.id == document_id), None)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def save(self, name: str, data: dict[str, Any]) -> StoredDocument:
        """
        Append a new record and persist the whole collection.
        Raises CachePersistenceError (nothing is kept) if persisting fails.
        """
        record = StoredDocument(
            id=self._unique_id(),
            name=name,
            upload_date=datetime.now(timezone.utc),
            data=data,
        )
        self._commit(self._documents + [record])
        logger.info("Saved document | id=%s name=%s", record.id, name)
        return record

    def delete(self, document_id: str) -> None:
        """Remove the record with this id; unknown ids are a no-op."""
        remaining = [d for d in self._documents if d.id != document_id]
        if len(remaining) == len(self._documents):
            return
        self._commit(remaining)
        logger.info("Deleted document | id=%s", document_id)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _unique_id(self) -> str:
        taken = {d.id for d in self._documents}
        doc_id = generate_document_id()
        while doc_id in taken:
            doc_id = generate_document_id()
        return doc_id

    def _commit(self, documents: list[StoredDocument]) -> None:
        try:
            block = json.dumps(
                [d.model_dump(mode="json", by_alias=True) for d in documents],
                ensure_ascii=False,
            )
        except (TypeError, ValueError) as exc:
            raise CacheSerializationError(f"Document data is not serializable: {exc}") from exc

        self._store.set_item(self._key, block)
        self._documents = documents

    def _read_block(self) -> list[StoredDocument]:
        raw = self._store.get_item(self._key)
        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Saved documents under %r are corrupt; ignoring them", self._key)
            return []
        if not isinstance(items, list):
            return []

        documents: list[StoredDocument] = []
        for item in items:
            try:
                documents.append(StoredDocument.model_validate(item))
            except PydanticValidationError:
                logger.warning("Skipping malformed saved document: %r", item)
        return documents
