"""
Per-folder JSON sidecar holding descriptive metadata for uploaded assets.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Iterator

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "alt", "caption", "description")


@dataclass
class MediaMetadata:
    title: str = ""
    alt: str = ""
    caption: str = ""
    description: str = ""
    favorite: bool = False

    @classmethod
    def default_for(cls, filename: str) -> "MediaMetadata":
        return cls(title=filename)

    @classmethod
    def from_dict(cls, data: dict) -> "MediaMetadata":
        return cls(
            title=str(data.get("title") or ""),
            alt=str(data.get("alt") or ""),
            caption=str(data.get("caption") or ""),
            description=str(data.get("description") or ""),
            favorite=bool(data.get("favorite", False)),
        )

    def as_dict(self) -> dict:
        return asdict(self)

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match against the text fields; needle is lowercased."""
        return any(needle in getattr(self, field).lower() for field in TEXT_FIELDS)


SidecarMap = Dict[str, MediaMetadata]


class SidecarStore:
    """
    Reads and writes `<root>/<folder>/<sidecar_filename>`.

    There is no partial update: callers read the whole map, modify it and
    write it back while holding `locked(folder)`.
    """

    def __init__(self, root: Path | str, filename: str = "media.meta.json"):
        self.root = Path(root)
        self.filename = filename
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, folder: str) -> Path:
        return self.root / folder / self.filename

    @contextmanager
    def locked(self, folder: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(folder, threading.RLock())
        with lock:
            yield

    def read(self, folder: str) -> SidecarMap:
        path = self.path_for(folder)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable sidecar %s: %s", path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring sidecar %s: expected a JSON object", path)
            return {}
        return {
            name: MediaMetadata.from_dict(entry)
            for name, entry in raw.items()
            if isinstance(entry, dict)
        }

    def write(self, folder: str, entries: SidecarMap) -> None:
        path = self.path_for(folder)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(
            {name: meta.as_dict() for name, meta in entries.items()},
            indent=2,
            ensure_ascii=False,
        )
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent, prefix=".", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
