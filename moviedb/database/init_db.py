"""
Database initialization and schema creation.
"""

from typing import Optional

from sqlalchemy import inspect

from moviedb.database.connection import DatabaseManager, get_db_manager
from moviedb.utils.logging_config import get_logger

logger = get_logger(__name__)

EXPECTED_TABLES = {'movies'}


def init_database(database_url: Optional[str] = None, reset: bool = False) -> DatabaseManager:
    """
    Initialize the database and create all tables.

    Args:
        database_url: SQLAlchemy database URL (default: from DATABASE_URL)
        reset: If True, drop existing tables before creating new ones

    Returns:
        DatabaseManager instance
    """
    db_manager = get_db_manager(database_url=database_url)

    if reset:
        logger.info("Resetting database (dropping all tables)...")
        db_manager.reset_database()
    else:
        db_manager.create_tables()
    logger.info("Database tables created.")

    return db_manager


def verify_schema(db_manager: DatabaseManager) -> bool:
    """
    Verify that all tables exist in the database.

    Args:
        db_manager: DatabaseManager instance

    Returns:
        True if all tables exist, False otherwise
    """
    existing_tables = set(inspect(db_manager.engine).get_table_names())
    missing_tables = EXPECTED_TABLES - existing_tables

    if missing_tables:
        logger.warning("Missing tables: %s", missing_tables)
        return False

    return True


if __name__ == "__main__":
    from moviedb.utils.logging_config import setup_logging

    setup_logging()
    manager = init_database(reset=False)
    if not verify_schema(manager):
        raise SystemExit(1)
