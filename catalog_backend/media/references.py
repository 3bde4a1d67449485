"""
Reference index: determines which catalog documents still point at an asset.

Path-valued fields hold `<base>/<folder>/<file>` and are compared exactly.
Product free text (description, product_info) can embed the file anywhere, so
it is searched for the bare filename instead. A lookup that fails is logged
and reported in `failed_lookups` rather than aborting the whole check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from catalog_backend.db import (
    BANNERS,
    CATEGORIES,
    POSTS,
    PRODUCT_IMAGES,
    PRODUCTS,
    DbClient,
)

logger = logging.getLogger(__name__)

REFERENCE_TYPES = ("products", "product_images", "categories", "posts", "banners")


def stored_path(base: str, folder: str, filename: str) -> str:
    return f"{base.strip('/')}/{folder}/{filename}"


@dataclass
class UsageReport:
    folder: str
    filename: str
    path: str
    references: Dict[str, List[dict]] = field(default_factory=dict)
    failed_lookups: List[str] = field(default_factory=list)

    @property
    def in_use(self) -> bool:
        return any(self.references.get(kind) for kind in REFERENCE_TYPES)

    @property
    def complete(self) -> bool:
        return not self.failed_lookups

    def as_dict(self) -> dict:
        payload = {
            "folder": self.folder,
            "file": self.filename,
            "path": self.path,
            "in_use": self.in_use,
            "complete": self.complete,
            "failed_lookups": list(self.failed_lookups),
        }
        for kind in REFERENCE_TYPES:
            payload[kind] = list(self.references.get(kind, []))
        return payload


class ReferenceIndex:
    """Runs one document-store lookup per referencing entity type."""

    def __init__(self, db: DbClient, base: str = "uploads"):
        self.db = db
        self.base = base

    def check(self, folder: str, filename: str) -> UsageReport:
        path = stored_path(self.base, folder, filename)
        report = UsageReport(folder=folder, filename=filename, path=path)
        lookups: Dict[str, Callable[[], List[dict]]] = {
            "products": lambda: self.db.find(
                PRODUCTS,
                contains={"description": filename, "product_info": filename},
                fields=("prod_id", "product_name"),
            ),
            "product_images": lambda: self.db.find(
                PRODUCT_IMAGES,
                where={"image_path": path},
                fields=("PRODUCT_ID", "is_main"),
            ),
            "categories": lambda: self.db.find(
                CATEGORIES,
                where={"category_image": path},
                fields=("category_name",),
            ),
            "posts": lambda: self.db.find(
                POSTS, where={"image": path}, fields=("title",)
            ),
            "banners": lambda: self._banners(path),
        }
        for kind, lookup in lookups.items():
            try:
                report.references[kind] = lookup()
            except Exception:
                logger.exception(
                    "Reference lookup %s failed for %s; treating as unreferenced",
                    kind,
                    path,
                )
                report.references[kind] = []
                report.failed_lookups.append(kind)
        return report

    def _banners(self, path: str) -> List[dict]:
        found: Dict[str, dict] = {}
        for field_name in ("image", "mobileImage"):
            for doc in self.db.find(
                BANNERS, where={field_name: path}, fields=("title",)
            ):
                found.setdefault(doc["id"], doc)
        return list(found.values())
