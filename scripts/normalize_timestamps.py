#!/usr/bin/env python3
"""Rewrite legacy timestamps (2025/1/5, ISO with T or offset, ...) into YYYY-MM-DD HH:MM:SS."""

import argparse
import logging
import os
import sys

# Add backend to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from portal.config import settings
from portal.database import create_database
from portal.services.maintenance import normalize_timestamps


def main():
    parser = argparse.ArgumentParser(description="Normalize stored timestamps")
    parser.add_argument(
        "--database-url",
        default=settings.DATABASE_URL,
        help="Database URL (defaults to DATABASE_URL from the environment)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Report changes without writing them"
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = create_database(args.database_url)
    try:
        db.create_schema()
        stats = normalize_timestamps(db, dry_run=args.dry_run)
    finally:
        db.dispose()

    mode = " (dry run)" if args.dry_run else ""
    print(f"Checked {stats['checked']} timestamps{mode}")
    print(f"  updated: {stats['updated']}")
    print(f"  invalid: {stats['invalid']}")
    return 1 if stats["invalid"] else 0


if __name__ == "__main__":
    sys.exit(main())
