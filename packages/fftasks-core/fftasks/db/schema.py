"""
Schema bootstrap for the tasks table.

Creates the table and its indexes if they are missing. Safe to run
repeatedly. Failures are logged and swallowed: the individual operations
that follow will fail with their own error instead.
"""

import logging

from fftasks.db.interface import DatabaseAdapter
from fftasks.db.query import TABLE
from fftasks.models.task import TASK_PRIORITIES, TASK_STATUSES

logger = logging.getLogger(__name__)


def _in_list(values) -> str:
    return ", ".join(f"'{v}'" for v in values)


POSTGRES_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {TABLE} (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NOT NULL CHECK (status IN ({_in_list(TASK_STATUSES)})),
        priority TEXT NOT NULL CHECK (priority IN ({_in_list(TASK_PRIORITIES)})),
        category TEXT,
        tags TEXT[],
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        due_date TIMESTAMP WITH TIME ZONE,
        completed_at TIMESTAMP WITH TIME ZONE
    )
"""

# Timestamps are ISO-8601 text in UTC; tags are a JSON array
SQLITE_TABLE = f"""
    CREATE TABLE IF NOT EXISTS {TABLE} (
        id TEXT PRIMARY KEY,
        title TEXT NOT NULL,
        description TEXT NOT NULL,
        status TEXT NOT NULL CHECK (status IN ({_in_list(TASK_STATUSES)})),
        priority TEXT NOT NULL CHECK (priority IN ({_in_list(TASK_PRIORITIES)})),
        category TEXT,
        tags TEXT,
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
        updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f+00:00', 'now')),
        due_date TEXT,
        completed_at TEXT
    )
"""

INDEXES = [
    f"CREATE INDEX IF NOT EXISTS idx_{TABLE}_status ON {TABLE}(status)",
    f"CREATE INDEX IF NOT EXISTS idx_{TABLE}_priority ON {TABLE}(priority)",
    f"CREATE INDEX IF NOT EXISTS idx_{TABLE}_category ON {TABLE}(category)",
    f"CREATE INDEX IF NOT EXISTS idx_{TABLE}_created_at ON {TABLE}(created_at DESC)",
]


def schema_statements(dialect: str) -> list[str]:
    """DDL for the given dialect, table first."""
    table = SQLITE_TABLE if dialect == "sqlite" else POSTGRES_TABLE
    return [table] + INDEXES


async def ensure_schema(adapter: DatabaseAdapter) -> bool:
    """
    Ensure the tasks table and its indexes exist.

    Args:
        adapter: Connected DatabaseAdapter

    Returns:
        True if every statement succeeded, False if an error was logged
    """
    try:
        for statement in schema_statements(adapter.dialect):
            await adapter.execute(statement)
    except Exception as e:
        logger.error(f"Error initializing {TABLE} table: {e}")
        return False

    logger.info(f"Ensured {TABLE} table exists ({adapter.dialect})")
    return True
