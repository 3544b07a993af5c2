"""Storage layer modules for LightFeed."""

from lightfeed.storage.database import DatabaseFeedMixProvider, DatabaseManager, build_sqlite_url

__all__ = [
    "DatabaseManager",
    "DatabaseFeedMixProvider",
    "build_sqlite_url",
]
