"""Database layer for bankrec."""

from bankrec.database.base import Database
from bankrec.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
