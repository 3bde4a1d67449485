"""
Point stored image references at their .webp copies.

Run convert_uploads_to_webp.py first so the referenced files exist.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_backend.dependencies import get_db_client
from catalog_backend.webp import migrate_documents_to_webp

logger = logging.getLogger(__name__)


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    counts = migrate_documents_to_webp(get_db_client())
    for collection, count in counts.items():
        logger.info("%s: %d documents updated", collection, count)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
