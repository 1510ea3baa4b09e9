"""
Configuration loaded from environment or defaults.
"""

import os
from pathlib import Path


DEFAULT_QUERY_TIMEOUT = 3.0


def get_database_url() -> str:
    """Get database URL from env or default SQLite file."""
    return os.getenv("DATABASE_URL", "") or "sqlite:///" + str(
        Path(__file__).resolve().parents[1] / "data" / "movies.db"
    )


def get_query_timeout() -> float:
    """Get per-query timeout in seconds."""
    return float(os.getenv("MOVIEDB_QUERY_TIMEOUT", DEFAULT_QUERY_TIMEOUT))


def get_pool_settings() -> dict:
    """Get connection pool settings for server databases."""
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", 5)),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", 10)),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT", 30)),
        "pool_recycle": int(os.getenv("DB_POOL_RECYCLE", 3600)),
    }


def get_echo() -> bool:
    """Whether to log all SQL statements."""
    return os.getenv("DB_ECHO", "false").lower() == "true"


def get_log_level() -> str:
    """Get log level from env or default."""
    return os.getenv("LOG_LEVEL", "INFO").upper()
