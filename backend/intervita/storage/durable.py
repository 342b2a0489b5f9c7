"""
Durable Key-Value Store — client-resident, per-origin

Mirrors the semantics of a browser's localStorage on disk:
  - string keys → string values, all kept in one JSON file
  - every write replaces the whole file atomically (temp file + rename),
    so readers never observe a half-written block
  - a quota caps the total serialized size; exceeding it fails the write
    and leaves the previous contents untouched

Several processes may share one file. There is no cross-process locking:
concurrent writers lose updates at whole-file granularity (last writer wins).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from intervita.core.errors import CachePersistenceError, StorageQuotaError

logger = logging.getLogger(__name__)

DEFAULT_QUOTA_BYTES = 5 * 1024 * 1024


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> str | None: ...
    def set_item(self, key: str, value: str) -> None: ...
    def remove_item(self, key: str) -> None: ...


class FileKeyValueStore:
    """JSON-file implementation of KeyValueStore."""

    def __init__(self, path: str | os.PathLike, quota_bytes: int = DEFAULT_QUOTA_BYTES) -> None:
        self._path  = Path(path)
        self._quota = quota_bytes

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise CachePersistenceError(f"Cannot read {self._path}: {exc}") from exc

        try:
            items = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning("Durable store %s is corrupt; starting empty", self._path)
            return {}
        return items if isinstance(items, dict) else {}

    def _write_all(self, items: dict[str, str]) -> None:
        block = json.dumps(items, ensure_ascii=False)
        size = len(block.encode("utf-8"))
        if size > self._quota:
            raise StorageQuotaError(size, self._quota)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(block)
                os.replace(tmp_name, self._path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CachePersistenceError(f"Cannot write {self._path}: {exc}") from exc
