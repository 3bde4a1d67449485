"""
Media library operations: listing, upload, metadata, favorites, download and
guarded delete on top of the asset store, sidecar store and reference index.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional, Sequence

from catalog_backend.errors import (
    ConflictError,
    InvalidPathError,
    NotFoundError,
    UpstreamError,
)
from catalog_backend.media.assets import AssetStore
from catalog_backend.media.references import ReferenceIndex, UsageReport
from catalog_backend.media.sidecar import TEXT_FIELDS, MediaMetadata, SidecarStore

logger = logging.getLogger(__name__)

ALL_FOLDERS = "all"


@dataclass
class MediaItem:
    name: str
    folder: str
    url: str
    download_url: str
    meta: MediaMetadata

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "folder": self.folder,
            "url": self.url,
            "download_url": self.download_url,
            "meta": self.meta.as_dict(),
        }


@dataclass
class MediaPage:
    total: int
    page: int
    limit: int
    items: list[MediaItem] = field(default_factory=list)


@contextmanager
def _upstream(action: str) -> Iterator[None]:
    try:
        yield
    except OSError as exc:
        logger.error("Media %s failed: %s", action, exc)
        raise UpstreamError(f"Media {action} failed: {exc}") from exc


class MediaManager:
    """Coordinates binaries, sidecar metadata and the reference guard."""

    def __init__(
        self,
        assets: AssetStore,
        sidecars: SidecarStore,
        references: ReferenceIndex,
        *,
        url_base: str = "uploads",
        api_prefix: str = "/api",
        page_size: int = 40,
    ):
        self.assets = assets
        self.sidecars = sidecars
        self.references = references
        self.url_base = url_base.strip("/")
        self.api_prefix = api_prefix.rstrip("/")
        self.page_size = page_size

    @property
    def folders(self) -> tuple[str, ...]:
        return self.assets.folders

    def _selected_folders(self, selector: Optional[str]) -> tuple[str, ...]:
        if not selector or selector == ALL_FOLDERS:
            return self.folders
        return (self.assets.check_folder(selector),)

    def _require_file(self, folder: str, filename: str) -> Path:
        path = self.assets.resolve(folder, filename)
        if not path.is_file():
            raise NotFoundError("File not found")
        return path

    def public_url(self, folder: str, filename: str) -> str:
        return f"/{self.url_base}/{folder}/{filename}"

    def stored_path(self, folder: str, filename: str) -> str:
        """Value catalog documents store to reference an asset."""
        return f"{self.url_base}/{folder}/{filename}"

    def list_media(
        self,
        category: Optional[str] = ALL_FOLDERS,
        search: str = "",
        page: int = 1,
        limit: Optional[int] = None,
    ) -> MediaPage:
        page = max(page or 1, 1)
        if not limit or limit < 1:
            limit = self.page_size
        needle = (search or "").strip().lower()

        entries: list[tuple[str, str, MediaMetadata]] = []
        for folder in self._selected_folders(category):
            with _upstream("listing"):
                names = self.assets.list_files(folder)
            sidecar = self.sidecars.read(folder)
            for name in names:
                meta = sidecar.get(name) or MediaMetadata.default_for(name)
                if needle and needle not in name.lower() and not meta.matches(needle):
                    continue
                entries.append((folder, name, meta))

        entries.sort(key=lambda entry: (not entry[2].favorite, entry[1], entry[0]))
        start = (page - 1) * limit
        items = [
            MediaItem(
                name=name,
                folder=folder,
                url=self.public_url(folder, name),
                download_url=f"{self.api_prefix}/media/download/{name}?cat={folder}",
                meta=meta,
            )
            for folder, name, meta in entries[start : start + limit]
        ]
        return MediaPage(total=len(entries), page=page, limit=limit, items=items)

    def upload(
        self, folder: str, payloads: Sequence[tuple[Optional[str], bytes]]
    ) -> list[str]:
        """Store each (original name, content) payload; returns the stored names."""
        self.assets.check_folder(folder)
        stored: list[str] = []
        with _upstream("upload"):
            for original, content in payloads:
                name = self.assets.allocate_name(folder, original)
                self.assets.write(folder, name, content)
                stored.append(name)
            if stored:
                with self.sidecars.locked(folder):
                    sidecar = self.sidecars.read(folder)
                    for name in stored:
                        sidecar[name] = MediaMetadata.default_for(name)
                    self.sidecars.write(folder, sidecar)
        logger.info("Uploaded %d file(s) to %s", len(stored), folder)
        return stored

    def update_metadata(self, folder: str, filename: str, fields: dict) -> MediaMetadata:
        self._require_file(folder, filename)
        with self.sidecars.locked(folder), _upstream("metadata update"):
            sidecar = self.sidecars.read(folder)
            meta = sidecar.get(filename) or MediaMetadata.default_for(filename)
            for key in TEXT_FIELDS:
                if fields.get(key) is not None:
                    setattr(meta, key, str(fields[key]))
            if fields.get("favorite") is not None:
                meta.favorite = bool(fields["favorite"])
            sidecar[filename] = meta
            self.sidecars.write(folder, sidecar)
        return meta

    def set_favorite(self, folder: str, filename: str, favorite: bool) -> MediaMetadata:
        return self.update_metadata(folder, filename, {"favorite": favorite})

    def download_path(self, folder: str, filename: str) -> Path:
        return self._require_file(folder, filename)

    def usage(self, folder: str, filename: str) -> UsageReport:
        self.assets.resolve(folder, filename)
        return self.references.check(folder, filename)

    def delete(self, folder: str, filename: str) -> UsageReport:
        """
        Remove an asset and its sidecar entry unless a catalog document still
        references it. The binary goes first; the two steps are not atomic.
        """
        self._require_file(folder, filename)
        report = self.references.check(folder, filename)
        if report.in_use:
            logger.info("Refusing to delete %s: still referenced", report.path)
            raise ConflictError("File is in use", usage=report.as_dict())
        if not report.complete:
            logger.warning(
                "Deleting %s with incomplete usage check (failed: %s)",
                report.path,
                ", ".join(report.failed_lookups),
            )
        self._remove(folder, filename)
        logger.info("Deleted %s", report.path)
        return report

    def _remove(self, folder: str, filename: str) -> None:
        with _upstream("delete"):
            self.assets.delete(folder, filename)
            with self.sidecars.locked(folder):
                sidecar = self.sidecars.read(folder)
                if sidecar.pop(filename, None) is not None:
                    self.sidecars.write(folder, sidecar)

    def parse_stored_path(self, value: Optional[str]) -> Optional[tuple[str, str]]:
        if not value:
            return None
        parts = value.strip("/").split("/")
        if len(parts) != 3 or parts[0] != self.url_base or parts[1] not in self.folders:
            return None
        return parts[1], parts[2]

    def release(self, value: Optional[str]) -> bool:
        """
        Drop an image a catalog document no longer points at. The asset is
        removed only when nothing else references it; returns whether it was.
        """
        parsed = self.parse_stored_path(value)
        if not parsed:
            return False
        folder, filename = parsed
        try:
            path = self.assets.resolve(folder, filename)
        except InvalidPathError:
            logger.warning("Ignoring release of invalid path %r", value)
            return False
        if not path.is_file():
            return False
        report = self.references.check(folder, filename)
        if report.in_use or not report.complete:
            return False
        self._remove(folder, filename)
        logger.info("Released %s", report.path)
        return True
