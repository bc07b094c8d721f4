"""
Database layer: adapters for PostgreSQL and SQLite, connection provider,
schema bootstrap and query builder.
"""

from fftasks.db.interface import DatabaseAdapter
from fftasks.db.provider import ConnectionProvider, create_adapter
from fftasks.db.schema import ensure_schema

__all__ = [
    "ConnectionProvider",
    "DatabaseAdapter",
    "create_adapter",
    "ensure_schema",
]
