"""
SQLite database adapter using aiosqlite.

Differences from PostgreSQL handled by the codec and query builder:
- Arrays: tags stored as JSON text, searched with json_each()
- Timestamps: stored as ISO-8601 text in UTC, which sorts chronologically
- Case folding: unicode_lower() is registered per connection, since LOWER() is ASCII-only
"""

import logging
from pathlib import Path
from typing import Optional, List, Any

from fftasks.db.interface import DatabaseAdapter
from fftasks.db.query import SQLITE_LOWER

logger = logging.getLogger(__name__)

try:
    import aiosqlite
    HAS_AIOSQLITE = True
except ImportError:
    HAS_AIOSQLITE = False
    aiosqlite = None

MEMORY_PATH = ":memory:"

_COUNTED_VERBS = {
    "INSERT": "INSERT 0 {count}",
    "UPDATE": "UPDATE {count}",
    "DELETE": "DELETE {count}",
}


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite adapter.

    Uses aiosqlite for async database operations.
    Automatically creates the database file and parent directories.
    """

    def __init__(self, db_path: str = "~/.fftasks/tasks.db", timeout: float = 10.0):
        """
        Initialize SQLite adapter.

        Args:
            db_path: Path to SQLite database file.
                    Supports ~ expansion for home directory, or ":memory:".
            timeout: Seconds to wait on a locked database before failing
        """
        if not HAS_AIOSQLITE:
            raise RuntimeError(
                "aiosqlite not installed. Run: pip install fftasks"
            )

        self.db_path = db_path if db_path == MEMORY_PATH else Path(db_path).expanduser()
        self.timeout = timeout
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Initialize database connection and create file if needed."""
        if self._conn is not None:
            return

        if self.db_path != MEMORY_PATH:
            # Ensure parent directory exists
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        # Connect (creates file if doesn't exist)
        self._conn = await aiosqlite.connect(str(self.db_path), timeout=self.timeout)

        # Use WAL mode for better concurrent access
        await self._conn.execute("PRAGMA journal_mode = WAL")

        # Row factory to return dicts
        self._conn.row_factory = aiosqlite.Row

        await self._conn.create_function(SQLITE_LOWER, 1, _unicode_lower, deterministic=True)

        logger.info(f"SQLite database connected: {self.db_path}")

    async def close(self) -> None:
        """Close database connection."""
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.info("SQLite connection closed")

    async def _run(self, query: str, args: tuple):
        if self._conn is None:
            await self.connect()
        return await self._conn.execute(self.format_query(query), args)

    async def execute(self, query: str, *args) -> str:
        """Execute and commit, returning a PostgreSQL-style status string."""
        cursor = await self._run(query, args)
        await self._conn.commit()

        words = query.split(None, 1)
        verb = words[0].upper() if words else ""
        if verb in _COUNTED_VERBS:
            return _COUNTED_VERBS[verb].format(count=cursor.rowcount)
        return "OK"

    async def fetch(self, query: str, *args) -> List[dict]:
        cursor = await self._run(query, args)
        return [dict(row) for row in await cursor.fetchall()]

    async def fetchrow(self, query: str, *args) -> Optional[dict]:
        cursor = await self._run(query, args)
        row = await cursor.fetchone()
        return dict(row) if row else None

    async def fetchval(self, query: str, *args) -> Any:
        cursor = await self._run(query, args)
        row = await cursor.fetchone()
        return row[0] if row else None

    @property
    def dialect(self) -> str:
        return "sqlite"

    @property
    def placeholder_style(self) -> str:
        return "qmark"
