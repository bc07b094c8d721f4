"""
Abstract database adapter interface.

Supports both PostgreSQL and SQLite; dialect differences are reported
through properties so the query builder and codec can adapt.
"""

import re
from abc import ABC, abstractmethod
from typing import Any


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Implementations must support:
    - Basic statement execution (execute, fetch, fetchrow, fetchval)
    - Dialect reporting (dialect, placeholder_style)
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize connection/pool."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connection/pool."""
        pass

    @abstractmethod
    async def execute(self, query: str, *args) -> str:
        """
        Execute a query and return status.

        Args:
            query: SQL query with $1, $2 placeholders
            *args: Query parameters

        Returns:
            Status string (e.g., "INSERT 0 1", "UPDATE 1", "DELETE 0")
        """
        pass

    @abstractmethod
    async def fetch(self, query: str, *args) -> list[dict]:
        """
        Fetch multiple rows as list of dicts.

        Args:
            query: SQL SELECT query
            *args: Query parameters

        Returns:
            List of row dicts
        """
        pass

    @abstractmethod
    async def fetchrow(self, query: str, *args) -> dict | None:
        """
        Fetch single row as dict.

        Args:
            query: SQL SELECT query
            *args: Query parameters

        Returns:
            Row dict or None if no results
        """
        pass

    @abstractmethod
    async def fetchval(self, query: str, *args) -> Any:
        """
        Fetch single value.

        Args:
            query: SQL SELECT query returning one column
            *args: Query parameters

        Returns:
            The value or None
        """
        pass

    @property
    @abstractmethod
    def dialect(self) -> str:
        """SQL dialect name: "postgres" or "sqlite"."""
        pass

    @property
    @abstractmethod
    def placeholder_style(self) -> str:
        """
        Return the placeholder style for this adapter.

        Returns:
            "dollar" for PostgreSQL ($1, $2, ...)
            "qmark" for SQLite (?, ?, ...)
        """
        pass

    def format_query(self, query: str) -> str:
        """
        Convert query placeholders to the adapter's style.

        Input uses $1, $2 style (PostgreSQL).
        For SQLite, converts to ? style; placeholders must therefore
        appear in parameter order, each exactly once.
        """
        if self.placeholder_style == "dollar":
            return query

        return re.sub(r'\$\d+', '?', query)


def affected_rows(status: str) -> int:
    """
    Row count from a status string such as "UPDATE 1" or "DELETE 0".

    Returns 0 when the status carries no count.
    """
    parts = status.split() if status else []
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return 0
