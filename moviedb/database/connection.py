"""
Database connection management using SQLAlchemy.

This module handles engine creation for PostgreSQL (production) and SQLite
(development and tests), session management, and the connection hooks the
movie search needs on SQLite.
"""

import os
from contextlib import contextmanager
from typing import Generator, Optional
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from moviedb import config
from moviedb.database.models import Base
from moviedb.database.predicates import register_sqlite_functions


def _is_memory_database(url) -> bool:
    """True for SQLite URLs without a backing file."""
    return (
        not url.database
        or url.database == ":memory:"
        or url.query.get("mode") == "memory"
    )


def _ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or _is_memory_database(url):
        return
    db_dir = os.path.dirname(os.path.abspath(url.database))
    os.makedirs(db_dir, exist_ok=True)


def set_sqlite_pragma(dbapi_conn, connection_record):
    """
    Enable foreign key constraints for SQLite.

    SQLite disables foreign key constraints by default.
    This event listener enables them for all connections.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseManager:
    """
    Database connection manager.

    Handles engine creation, session management, and database initialization.
    """

    def __init__(
        self,
        database_url: Optional[str] = None,
        echo: Optional[bool] = None,
        query_timeout: Optional[float] = None
    ):
        """
        Initialize database manager.

        Args:
            database_url: SQLAlchemy database URL (default: from DATABASE_URL)
            echo: If True, log all SQL statements (default: from DB_ECHO)
            query_timeout: Per-call deadline in seconds (default: from MOVIEDB_QUERY_TIMEOUT)
        """
        self.database_url = database_url or config.get_database_url()
        self.query_timeout = query_timeout if query_timeout is not None else config.get_query_timeout()
        echo = config.get_echo() if echo is None else echo

        url = make_url(self.database_url)
        self.is_sqlite = url.get_backend_name() == "sqlite"

        # Waiting for a pooled connection counts against the per-call deadline
        pool_settings = config.get_pool_settings()
        pool_settings["pool_timeout"] = min(pool_settings["pool_timeout"], self.query_timeout)

        if self.is_sqlite and _is_memory_database(url):
            # An in-memory database only lives as long as its one connection
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool
            )
        elif self.is_sqlite:
            _ensure_sqlite_directory(self.database_url)
            # One connection per checkout, so callers never share a transaction
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
                **pool_settings
            )
        else:
            self.engine = create_engine(
                self.database_url,
                echo=echo,
                pool_pre_ping=True,
                **pool_settings
            )

        if self.is_sqlite:
            event.listen(self.engine, "connect", set_sqlite_pragma)
            event.listen(self.engine, "connect", register_sqlite_functions)

        # Entities must stay readable after the session that loaded them closes
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine
        )

    def create_tables(self):
        """
        Create all tables defined in the models.

        This creates tables if they don't exist. Existing tables are not modified.
        """
        Base.metadata.create_all(bind=self.engine)

    def drop_tables(self):
        """
        Drop all tables defined in the models.

        WARNING: This will delete all data in the database!
        """
        Base.metadata.drop_all(bind=self.engine)

    def reset_database(self):
        """
        Drop and recreate all tables.

        WARNING: This will delete all data in the database!
        """
        self.drop_tables()
        self.create_tables()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for database sessions.

        Automatically commits on success and rolls back on failure.

        Usage:
            with db_manager.session_scope() as session:
                session.execute(stmt)

        Yields:
            SQLAlchemy Session object
        """
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self):
        """Close the database engine and all connections."""
        self.engine.dispose()


# Global database manager instance (singleton pattern)
_db_manager = None


def get_db_manager(database_url: Optional[str] = None, echo: Optional[bool] = None) -> DatabaseManager:
    """
    Get or create the global database manager instance.

    Args:
        database_url: SQLAlchemy database URL
        echo: If True, log all SQL statements

    Returns:
        DatabaseManager instance
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(database_url=database_url, echo=echo)
    return _db_manager
