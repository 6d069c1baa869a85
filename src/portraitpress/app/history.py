"""
Photo history. Best-effort: a failing store never breaks a composition.

Stores keep at most `limit` entries, newest first; the oldest is evicted on overflow.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Protocol

from portraitpress.core.config import HISTORY_LIMIT

logger = logging.getLogger(__name__)

_IMAGE_FIELDS = ("original_image", "edited_image", "composed_image")


@dataclass(frozen=True)
class HistoryEntry:
    """One finished photo. Images are encoded PNG/JPEG bytes."""
    id: str
    name: str
    timestamp: float
    original_image: bytes
    edited_image: bytes
    composed_image: bytes
    settings: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        name: str,
        original_image: bytes,
        edited_image: bytes,
        composed_image: bytes,
        settings: Optional[dict[str, Any]] = None,
    ) -> "HistoryEntry":
        return HistoryEntry(
            id=uuid.uuid4().hex,
            name=name,
            timestamp=time.time(),
            original_image=original_image,
            edited_image=edited_image,
            composed_image=composed_image,
            settings=dict(settings or {}),
        )


class HistoryStore(Protocol):
    def save(self, entry: HistoryEntry) -> None: ...

    def load(self) -> List[HistoryEntry]: ...

    def remove(self, entry_id: str) -> None: ...

    def clear(self) -> None: ...


class MemoryHistoryStore:
    def __init__(self, limit: int = HISTORY_LIMIT) -> None:
        self.limit = limit
        self._entries: List[HistoryEntry] = []

    def save(self, entry: HistoryEntry) -> None:
        self._entries = [e for e in self._entries if e.id != entry.id]
        self._entries.insert(0, entry)
        del self._entries[self.limit :]

    def load(self) -> List[HistoryEntry]:
        return list(self._entries)

    def remove(self, entry_id: str) -> None:
        self._entries = [e for e in self._entries if e.id != entry_id]

    def clear(self) -> None:
        self._entries = []


class FileHistoryStore:
    """
    Directory-backed history: index.json holds metadata, images live next to it
    as <id>.<field>.png.
    """

    def __init__(self, base_dir: Path, limit: int = HISTORY_LIMIT) -> None:
        self.base_dir = Path(base_dir)
        self.limit = limit
        self.index_path = self.base_dir / "index.json"

    def _read_index(self) -> List[dict[str, Any]]:
        if not self.index_path.exists():
            return []
        return json.loads(self.index_path.read_text(encoding="utf-8"))

    def _write_index(self, rows: List[dict[str, Any]]) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        tmp = self.index_path.with_suffix(".tmp")
        tmp.write_text(json.dumps(rows, indent=2), encoding="utf-8")
        tmp.replace(self.index_path)

    def _image_path(self, entry_id: str, field_name: str) -> Path:
        return self.base_dir / f"{entry_id}.{field_name}.png"

    def _delete_files(self, entry_id: str) -> None:
        for name in _IMAGE_FIELDS:
            self._image_path(entry_id, name).unlink(missing_ok=True)

    def save(self, entry: HistoryEntry) -> None:
        # Index first: a corrupt index must not leave orphaned image files.
        rows = [r for r in self._read_index() if r["id"] != entry.id]
        rows.insert(0, {"id": entry.id, "name": entry.name, "timestamp": entry.timestamp, "settings": entry.settings})

        self.base_dir.mkdir(parents=True, exist_ok=True)
        try:
            for name in _IMAGE_FIELDS:
                self._image_path(entry.id, name).write_bytes(getattr(entry, name))
            self._write_index(rows[: self.limit])
        except OSError:
            self._delete_files(entry.id)
            raise
        for evicted in rows[self.limit :]:
            self._delete_files(evicted["id"])

    def _load_row(self, row: dict[str, Any]) -> HistoryEntry:
        images = {name: self._image_path(row["id"], name).read_bytes() for name in _IMAGE_FIELDS}
        return HistoryEntry(
            id=row["id"],
            name=row["name"],
            timestamp=float(row["timestamp"]),
            settings=dict(row.get("settings") or {}),
            **images,
        )

    def load(self) -> List[HistoryEntry]:
        """Entries newest first. Rows whose files are missing or unreadable are skipped."""
        entries: List[HistoryEntry] = []
        for row in self._read_index():
            try:
                entries.append(self._load_row(row))
            except (OSError, KeyError, TypeError, ValueError):
                entry_id = row.get("id") if isinstance(row, dict) else row
                logger.warning("Skipping unreadable history entry %s", entry_id, exc_info=True)
        return entries

    def remove(self, entry_id: str) -> None:
        rows = self._read_index()
        self._delete_files(entry_id)
        self._write_index([r for r in rows if r["id"] != entry_id])

    def clear(self) -> None:
        for row in self._read_index():
            self._delete_files(row["id"])
        self._write_index([])


class HistoryRecorder:
    """
    Wraps a HistoryStore so failures are logged and swallowed.
    """

    def __init__(self, store: HistoryStore) -> None:
        self.store = store

    def record(self, entry: HistoryEntry) -> bool:
        try:
            self.store.save(entry)
        except Exception:
            logger.warning("Could not save history entry %s", entry.id, exc_info=True)
            return False
        return True

    def entries(self) -> List[HistoryEntry]:
        try:
            return self.store.load()
        except Exception:
            logger.warning("Could not load history", exc_info=True)
            return []

    def remove(self, entry_id: str) -> bool:
        try:
            self.store.remove(entry_id)
        except Exception:
            logger.warning("Could not remove history entry %s", entry_id, exc_info=True)
            return False
        return True

    def clear(self) -> bool:
        try:
            self.store.clear()
        except Exception:
            logger.warning("Could not clear history", exc_info=True)
            return False
        return True
