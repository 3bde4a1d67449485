"""
Filesystem asset store: one directory per media folder under the upload root.
"""

from __future__ import annotations

import os
import re
import time
from pathlib import Path
from typing import Iterable

from catalog_backend.errors import InvalidPathError


def normalize_upload_name(filename: str | None) -> str:
    """Basename of an uploaded file with whitespace runs collapsed to dashes."""
    name = re.split(r"[\\/]", filename or "")[-1]
    name = name.replace("\0", "").strip()
    name = re.sub(r"\s+", "-", name)
    if name in {"", ".", ".."}:
        return "file"
    return name.lstrip(".") or "file"


class AssetStore:
    """Binary files grouped by folder, every path checked to stay under the root."""

    def __init__(self, root: Path | str, folders: Iterable[str], hidden: Iterable[str] = ()):
        self.root = Path(root).resolve()
        self.folders = tuple(folders)
        self.hidden = set(hidden)

    def check_folder(self, folder: str) -> str:
        if folder not in self.folders:
            raise InvalidPathError(f"Unknown media folder: {folder!r}")
        return folder

    def resolve(self, folder: str, filename: str) -> Path:
        """
        Absolute path of `filename` inside `folder`.

        Raises InvalidPathError for unknown folders, names that carry path
        segments, and anything that normalizes outside the folder.
        """
        self.check_folder(folder)
        if (
            not filename
            or filename in {".", ".."}
            or "\0" in filename
            or "/" in filename
            or "\\" in filename
        ):
            raise InvalidPathError(f"Invalid file name: {filename!r}")
        base = (self.root / folder).resolve()
        resolved = Path(os.path.normpath(base / filename))
        if resolved.parent != base:
            raise InvalidPathError(f"Invalid file name: {filename!r}")
        return resolved

    def exists(self, folder: str, filename: str) -> bool:
        return self.resolve(folder, filename).is_file()

    def list_files(self, folder: str) -> list[str]:
        directory = self.root / self.check_folder(folder)
        if not directory.is_dir():
            return []
        return [
            entry.name
            for entry in os.scandir(directory)
            if entry.is_file()
            and not entry.name.startswith(".")
            and entry.name not in self.hidden
        ]

    def allocate_name(self, folder: str, original: str | None) -> str:
        """Timestamp-prefixed name that does not collide with an existing file."""
        base_name = f"{int(time.time() * 1000)}-{normalize_upload_name(original)}"
        candidate = base_name
        stem, suffix = os.path.splitext(base_name)
        counter = 1
        while self.resolve(folder, candidate).exists():
            candidate = f"{stem}-{counter}{suffix}"
            counter += 1
        return candidate

    def write(self, folder: str, filename: str, content: bytes) -> Path:
        path = self.resolve(folder, filename)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def delete(self, folder: str, filename: str) -> bool:
        """Remove a file; a file that is already gone counts as removed."""
        path = self.resolve(folder, filename)
        path.unlink(missing_ok=True)
        return True
