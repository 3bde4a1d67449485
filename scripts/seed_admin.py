"""
Create the initial admin account from ADMIN_SEED_* settings.
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
from catalog_backend.db import ADMINS
from catalog_backend.dependencies import get_db_client
from catalog_backend.security import hash_password

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed the admin account")
    parser.add_argument("--username", type=str, default=settings.admin_seed_username)
    parser.add_argument("--email", type=str, default=settings.admin_seed_email)
    parser.add_argument("--password", type=str, default=settings.admin_seed_password)
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    db = get_db_client()
    if db.find_one(ADMINS, where={"username": args.username}):
        logger.info("Admin %s already exists", args.username)
        return 0
    db.insert(
        ADMINS,
        {
            "username": args.username,
            "email": args.email,
            "password_hash": hash_password(args.password),
        },
    )
    logger.info("Created admin %s", args.username)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
