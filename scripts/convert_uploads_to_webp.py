"""
Write a .webp copy of every JPEG/PNG under the upload root.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalog_backend.config import get_settings
from catalog_backend.webp import convert_uploads_to_webp

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Convert uploaded images to WebP")
    parser.add_argument(
        "--root",
        type=str,
        default=settings.upload_root,
        help="Upload root to scan (defaults to UPLOAD_ROOT)",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=82,
        help="WebP quality (0-100)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    written = convert_uploads_to_webp(
        args.root,
        quality=args.quality,
        sidecar_filename=settings.sidecar_filename,
    )
    logger.info("Converted %d images", len(written))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
