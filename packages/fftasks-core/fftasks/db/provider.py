"""
Connection provider.

Resolves the backend from configuration, connects lazily on first use,
bootstraps the schema once and hands the same adapter to every caller
for the rest of the process. Built once at startup and injected into
services, so tests can pass their own.
"""

import asyncio
import logging
from typing import Optional

from fftasks.config import FFTasksConfig, load_config
from fftasks.db.interface import DatabaseAdapter
from fftasks.db.schema import ensure_schema
from fftasks.errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_adapter(config: FFTasksConfig) -> Optional[DatabaseAdapter]:
    """
    Create the adapter selected by configuration.

    Returns:
        PostgresAdapter or SQLiteAdapter, or None if no endpoint is configured

    Raises:
        ConfigurationError: If the database type is unknown
    """
    db = config.database
    db_type = db.type.lower()

    if db_type in ("postgres", "postgresql"):
        if not db.postgres_url:
            return None

        from fftasks.db.postgres import PostgresAdapter

        logger.info("Using PostgreSQL adapter")
        return PostgresAdapter(
            db.postgres_url,
            connect_timeout=db.connect_timeout,
            command_timeout=db.command_timeout,
        )

    if db_type == "sqlite":
        from fftasks.db.sqlite import SQLiteAdapter

        logger.info(f"Using SQLite adapter: {db.sqlite_path}")
        return SQLiteAdapter(db.sqlite_path, timeout=db.connect_timeout)

    raise ConfigurationError(
        f"Unknown database type: {db_type}. "
        "Use 'postgres' or 'sqlite'."
    )


class ConnectionProvider:
    """
    Process-wide source of the database adapter.

    get_adapter() returns None when no endpoint is configured; callers
    turn that into an "unconfigured" outcome instead of failing hard.
    """

    def __init__(self, config: Optional[FFTasksConfig] = None, adapter: Optional[DatabaseAdapter] = None):
        """
        Args:
            config: FFTasksConfig. Loaded from the default location if omitted.
            adapter: Prebuilt adapter, bypassing configuration (tests).
        """
        self.config = config if config is not None else load_config()
        self._adapter = adapter
        self._ready = False
        self._schema_ok: Optional[bool] = None
        self._lock = asyncio.Lock()

    @property
    def configured(self) -> bool:
        return self._adapter is not None or self.config.database.is_configured

    @property
    def schema_ok(self) -> Optional[bool]:
        """Result of the schema bootstrap, or None before it ran."""
        return self._schema_ok

    @property
    def max_results(self) -> int:
        return self.config.database.max_results

    async def get_adapter(self) -> Optional[DatabaseAdapter]:
        """
        Get the connected adapter, creating it on first call.

        Returns:
            Connected DatabaseAdapter, or None if unconfigured
        """
        if self._ready:
            return self._adapter

        async with self._lock:
            if self._ready:
                return self._adapter

            if self._adapter is None:
                self._adapter = create_adapter(self.config)
                if self._adapter is None:
                    logger.warning("No database endpoint configured")
                    return None

            await self._adapter.connect()
            self._schema_ok = await ensure_schema(self._adapter)
            self._ready = True

        return self._adapter

    async def close(self) -> None:
        """Close the adapter. Only the hosting process calls this."""
        if self._adapter is not None:
            await self._adapter.close()
        self._ready = False
