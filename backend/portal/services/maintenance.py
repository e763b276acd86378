"""
One-off data maintenance: rewrite legacy timestamps into the canonical format.
"""

import logging
from typing import Dict

from portal.core.dates import normalize_timestamp
from portal.database import Database

logger = logging.getLogger(__name__)

# table -> (key column, timestamp columns)
TIMESTAMP_COLUMNS = {
    "users": ("id", ("created_at",)),
    "products": ("id", ("created_at",)),
    "orders": ("id", ("created_at", "payment_date")),
    "admin_users": ("id", ("created_at",)),
    "password_reset_tokens": ("token", ("expires_at", "created_at")),
    "sessions": ("id", ("expires_at", "created_at")),
}


def normalize_timestamps(db: Database, dry_run: bool = False) -> Dict[str, int]:
    """
    Rewrite every non-canonical timestamp in place.

    Returns counts of ``checked``, ``updated`` and ``invalid`` values. Values
    that cannot be parsed are logged and left untouched.
    """
    stats = {"checked": 0, "updated": 0, "invalid": 0}

    for table, (key, columns) in TIMESTAMP_COLUMNS.items():
        for column in columns:
            rows = db.query_all(
                f"SELECT {key} AS row_key, {column} AS value FROM {table} WHERE {column} IS NOT NULL"
            )
            for row in rows:
                stats["checked"] += 1
                try:
                    canonical = normalize_timestamp(row["value"])
                except ValueError:
                    stats["invalid"] += 1
                    logger.warning(f"{table}.{column} [{row['row_key']}]: unparsable {row['value']!r}")
                    continue
                if canonical == row["value"]:
                    continue

                stats["updated"] += 1
                logger.info(f"{table}.{column} [{row['row_key']}]: {row['value']!r} -> {canonical}")
                if not dry_run:
                    db.execute(
                        f"UPDATE {table} SET {column} = ? WHERE {key} = ?",
                        [canonical, row["row_key"]],
                    )

    return stats
