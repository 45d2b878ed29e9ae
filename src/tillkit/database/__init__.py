"""Database layer for tillkit application."""

from tillkit.database.base import Database
from tillkit.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
