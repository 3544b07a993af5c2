"""
Database connection and session management.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator, Optional

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from lightfeed.config import get_config
from lightfeed.core.parser import FeedSource
from lightfeed.logger import get_logger
from lightfeed.models import Base

if TYPE_CHECKING:
    from lightfeed.config import DatabaseConfig

logger = get_logger(__name__)


def build_sqlite_url(path: str) -> str:
    """Build a SQLite URL from a file path.

    Args:
        path: File path, ``:memory:`` or an existing ``sqlite://`` URL

    Returns:
        SQLAlchemy URL string
    """
    if path.startswith("sqlite://"):
        return path
    if path == ":memory:":
        return "sqlite://"

    Path(path).parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def _set_sqlite_pragma(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    # Enable foreign key constraints
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """Database manager for context-managed database operations."""

    def __init__(self, db_path: Optional[str] = None, db_config: Optional["DatabaseConfig"] = None):
        """Initialize database manager.

        Args:
            db_path: Optional custom SQLite database path
            db_config: Optional custom database configuration

        Note:
            If neither db_path nor db_config is provided, uses the global config.
        """
        config = db_config or get_config().database

        self.db_path = db_path or config.path
        self.echo = config.echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def engine(self) -> Engine:
        """Get the database engine."""
        if self._engine is None:
            url = build_sqlite_url(self.db_path)
            engine_kwargs = {
                "echo": self.echo,
                "connect_args": {
                    "check_same_thread": False,  # Needed for SQLite
                    "timeout": 30,  # 30 second timeout for locks
                },
            }
            if url == "sqlite://":
                # In-memory databases live in a single connection
                engine_kwargs["poolclass"] = StaticPool

            self._engine = create_engine(url, **engine_kwargs)
            event.listen(self._engine, "connect", _set_sqlite_pragma)
            logger.debug(f"Created database engine for {url}")

        return self._engine

    def init_db(self, drop_all: bool = False) -> None:
        """Initialize database tables.

        Args:
            drop_all: If True, drop existing tables first
        """
        if drop_all:
            logger.warning("Dropping all tables - data will be lost!")
            Base.metadata.drop_all(bind=self.engine)

        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Get a database session.

        Commits on success, rolls back and re-raises on error.

        Yields:
            SQLAlchemy Session instance
        """
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                autocommit=False,
                autoflush=False,
                expire_on_commit=False,
                bind=self.engine,
            )
        session = self._session_factory()

        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def __enter__(self) -> "DatabaseManager":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()


class DatabaseFeedMixProvider:
    """Feed-mix provider reading page feed mixes from the database."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def list_page_feed_mix(self, page_id: str) -> list[FeedSource]:
        """Feed mix of a page, ordered by title then feed id."""
        from lightfeed.storage.repositories.page_repo import PageRepository

        with self.db.session() as session:
            return PageRepository(session).list_page_feed_mix(page_id)
