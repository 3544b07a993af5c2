#!/usr/bin/env python3
"""
Initialize the LightFeed database.

This script creates all necessary database tables.
"""

import argparse

from lightfeed.config import get_config
from lightfeed.logger import get_logger, setup_logger
from lightfeed.storage.database import DatabaseManager

logger = get_logger(__name__)


def main() -> None:
    """Initialize the database."""
    parser = argparse.ArgumentParser(description="Initialize LightFeed database")
    parser.add_argument("--db-path", help="SQLite database path (defaults to DB_PATH)")
    parser.add_argument(
        "--drop", action="store_true", help="Drop existing tables before creating new ones"
    )
    args = parser.parse_args()

    setup_logger()
    db_path = args.db_path or get_config().database.path

    logger.info(f"Initializing database at {db_path}")
    with DatabaseManager(db_path) as db:
        db.init_db(drop_all=args.drop)
    logger.info("Database initialized successfully")


if __name__ == "__main__":
    main()
