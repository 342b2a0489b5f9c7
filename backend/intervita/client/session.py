"""
Interview Session — client control flow

    upload resume ─► DocumentParserGateway ─► DocumentCache.save ─► accepted
    saved resume  ─► DocumentCache.load ───────────────────────────► accepted
    connect       ─► ConnectionBroker.connect(mode, accepted resume)

A document is only "accepted" once it was parsed to non-empty data and
persisted; any failure resets the session to the pre-upload state. Failures
are logged and reported through the return value, never raised into the host
loop; only ConfigurationError escapes, since nothing can recover from it.
"""

from __future__ import annotations

import logging
from typing import Any

from intervita.client.connection import ConnectionBroker, ConnectionMode, ConnectionState
from intervita.core.config import Settings, get_settings
from intervita.core.errors import ConfigurationError, IntervitaError
from intervita.schemas.documents import StoredDocument
from intervita.services.parser import DocumentParserGateway
from intervita.storage.document_cache import DocumentCache

logger = logging.getLogger(__name__)


class InterviewSession:
    def __init__(
        self,
        broker:   ConnectionBroker,
        parser:   DocumentParserGateway,
        cache:    DocumentCache,
        settings: Settings | None = None,
    ) -> None:
        self._broker   = broker
        self._parser   = parser
        self._cache    = cache
        self._settings = settings or get_settings()
        self._document: dict[str, Any] | None = None

    # ------------------------------------------------------------------
    # Document
    # ------------------------------------------------------------------

    @property
    def document(self) -> dict[str, Any] | None:
        return self._document

    @property
    def document_accepted(self) -> bool:
        return self._document is not None

    @property
    def saved_documents(self) -> list[StoredDocument]:
        return self._cache.list()

    async def upload_document(self, filename: str, file_bytes: bytes) -> StoredDocument | None:
        """Parse, cache and accept a resume. Returns the cached record, or None on failure."""
        self._document = None
        try:
            data = await self._parser.parse(file_bytes, filename=filename)
            record = self._cache.save(filename, data)
        except IntervitaError as exc:
            logger.error("Error processing resume %s: %s", filename, exc)
            return None

        self._document = record.data
        return record

    def use_saved_document(self, document_id: str) -> bool:
        data = self._cache.load(document_id)
        if data is None:
            logger.warning("Saved resume %s not found", document_id)
            return False
        self._document = data
        return True

    def delete_saved_document(self, document_id: str) -> bool:
        try:
            self._cache.delete(document_id)
        except IntervitaError as exc:
            logger.error("Could not delete saved resume %s: %s", document_id, exc)
            return False
        return True

    def reset(self) -> None:
        self._document = None

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @property
    def connection(self) -> ConnectionState:
        return self._broker.state

    @property
    def room_visible(self) -> bool:
        """True once a transport endpoint is known, statically or from a connect."""
        return bool(self._settings.livekit_url or self._broker.state.server_url)

    async def set_connected(self, connected: bool, mode: ConnectionMode | str = ConnectionMode.ENV) -> bool:
        """
        Connect with the accepted resume, or disconnect. A statically configured
        transport endpoint always forces env mode. Returns True if the broker now
        wants a live session.
        """
        if not connected:
            await self._broker.disconnect()
            return False

        effective = ConnectionMode.ENV if self._settings.livekit_url else ConnectionMode(mode)
        try:
            await self._broker.connect(effective, self._document)
        except ConfigurationError:
            raise
        except IntervitaError as exc:
            logger.error("Connection failed | mode=%s error=%s", effective.value, exc)
            self._broker.notifications.show(str(exc))
            return False

        return self._broker.state.should_connect


def create_session(settings: Settings | None = None) -> InterviewSession:
    """Wire a session from settings: file-backed cache, default HTTP clients."""
    from intervita.storage.durable import FileKeyValueStore

    cfg = settings or get_settings()
    store = FileKeyValueStore(cfg.document_cache_path, quota_bytes=cfg.document_cache_quota_bytes)
    return InterviewSession(
        broker=ConnectionBroker(cfg),
        parser=DocumentParserGateway(cfg),
        cache=DocumentCache(store, key=cfg.document_cache_key),
        settings=cfg,
    )
