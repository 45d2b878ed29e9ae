"""Database factory functions for creating database instances."""

from typing import Optional

from tillkit.config import Settings, default_database_path, load_settings
from tillkit.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks TILLKIT_DB_PATH
            environment variable, then defaults to ~/.tillkit/tillkit.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = load_settings().database_path

    if database_path is None:
        database_path = default_database_path()

    return SQLAlchemyDatabase(f"sqlite:///{database_path}")


def create_database(
    settings: Settings, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create a database from settings.

    An explicit database_path wins; otherwise TILLKIT_DATABASE_URL is used
    as-is when set, falling back to the SQLite path.
    """
    if database_path is None and settings.database_url:
        return SQLAlchemyDatabase(settings.database_url)
    return create_sqlite_database(database_path or settings.database_path)
