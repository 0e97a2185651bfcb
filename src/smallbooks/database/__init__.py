"""Database layer for smallbooks application."""

from smallbooks.database.base import Database, UnitOfWork
from smallbooks.database.factories import create_sqlite_database

__all__ = ["Database", "UnitOfWork", "create_sqlite_database"]
