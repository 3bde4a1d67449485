"""
WebP maintenance helpers.

`convert_uploads_to_webp` writes a .webp sibling for every JPEG/PNG under the
upload root; `migrate_documents_to_webp` rewrites the image references stored
in catalog documents to point at those siblings.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any

from PIL import Image

from catalog_backend.db import (
    BANNERS,
    CATEGORIES,
    POSTS,
    PRODUCT_IMAGES,
    PRODUCTS,
    DbClient,
)
from catalog_backend.media.sidecar import SidecarStore

logger = logging.getLogger(__name__)

CONVERTIBLE = re.compile(r"\.(jpe?g|png)$", re.IGNORECASE)
REFERENCE_EXTENSION = re.compile(r"\.(?:jpe?g|png)\b", re.IGNORECASE)

REFERENCE_FIELDS = {
    PRODUCTS: ("description", "product_info"),
    PRODUCT_IMAGES: ("image_path",),
    CATEGORIES: ("category_image",),
    POSTS: ("image",),
    BANNERS: ("image", "mobileImage"),
}


def convert_uploads_to_webp(
    root: Path | str,
    *,
    quality: int = 82,
    sidecar_filename: str = "media.meta.json",
) -> list[Path]:
    """Convert images lacking a .webp sibling; returns the files written."""
    root = Path(root)
    sidecars = SidecarStore(root, sidecar_filename)
    written: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root):
        folder = os.path.relpath(dirpath, root)
        converted: dict[str, str] = {}
        for name in sorted(filenames):
            if name.startswith(".") or not CONVERTIBLE.search(name):
                continue
            source = Path(dirpath) / name
            target = source.with_suffix(".webp")
            if target.exists():
                continue
            with Image.open(source) as image:
                image.save(target, "WEBP", quality=quality)
            logger.info("Converted %s", target)
            written.append(target)
            converted[name] = target.name
        if converted:
            _copy_sidecar_entries(sidecars, folder, converted)
    return written


def _copy_sidecar_entries(
    sidecars: SidecarStore, folder: str, renames: dict[str, str]
) -> None:
    with sidecars.locked(folder):
        entries = sidecars.read(folder)
        changed = False
        for old_name, new_name in renames.items():
            meta = entries.get(old_name)
            if meta is None or new_name in entries:
                continue
            copied = type(meta).from_dict(meta.as_dict())
            if copied.title == old_name:
                copied.title = new_name
            entries[new_name] = copied
            changed = True
        if changed:
            sidecars.write(folder, entries)


def replace_extensions(value: Any) -> Any:
    """Swap JPEG/PNG extensions for .webp inside strings, lists and dicts."""
    if isinstance(value, str):
        return REFERENCE_EXTENSION.sub(".webp", value)
    if isinstance(value, list):
        return [replace_extensions(item) for item in value]
    if isinstance(value, dict):
        return {key: replace_extensions(item) for key, item in value.items()}
    return value


def migrate_documents_to_webp(db: DbClient) -> dict[str, int]:
    """Rewrite image references document by document; returns updates per collection."""
    updated: dict[str, int] = {}
    for collection, fields in REFERENCE_FIELDS.items():
        count = 0
        for doc in db.find(collection):
            changes = {}
            for field_name in fields:
                original = doc.get(field_name)
                migrated = replace_extensions(original)
                if migrated != original:
                    changes[field_name] = migrated
            if changes:
                db.update(collection, doc["id"], changes)
                logger.info("Updated %s %s", collection, doc["id"])
                count += 1
        updated[collection] = count
    return updated
