"""
Open the configured database, create the embedded schema if needed and seed
the reference tables.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from drrm.config import get_settings
from drrm.db import BackendUnavailableError
from drrm.dependencies import build_storage

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Initialize the preparedness database")
    parser.add_argument(
        "--sqlite-path",
        type=str,
        default=None,
        help="Override the embedded SQLite file (ignored when DATABASE_URL is set)",
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Only open the backend and create the embedded schema",
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    settings = get_settings()
    if args.sqlite_path:
        settings = settings.model_copy(update={"sqlite_path": args.sqlite_path})

    try:
        storage = build_storage(settings)
    except BackendUnavailableError as exc:
        logger.error("%s", exc)
        return 1

    try:
        logger.info("Opened %s backend", storage.kind.value)
        if args.no_seed:
            return 0
        seeded = storage.initialize_reference_data()
        for table, count in seeded.items():
            if count:
                logger.info("Seeded %d rows into %s", count, table)
            else:
                logger.info("%s already populated, left unchanged", table)
    finally:
        storage.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
