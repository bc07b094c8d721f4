"""
Record codec: backend rows <-> Task.

PostgreSQL (asyncpg) hands back datetime objects and native text arrays;
SQLite stores timestamps as ISO-8601 text and tags as JSON. Everything is
normalized to aware UTC datetimes in memory and a single ISO form on output.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from fftasks.errors import ValidationError
from fftasks.models.task import Task

logger = logging.getLogger(__name__)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Normalize a timestamp to an aware UTC datetime.

    Accepts datetime, date, or ISO-8601 strings (a trailing "Z" and
    date-only strings are allowed). Naive values are taken as UTC.

    Raises:
        ValidationError: If the value cannot be interpreted as a timestamp
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid timestamp: {value!r} (expected ISO-8601)")
        return parse_timestamp(parsed)

    raise ValidationError(f"Invalid timestamp type: {type(value).__name__}")


def format_timestamp(value: Any) -> Optional[str]:
    """Render a timestamp in the one output form used everywhere."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.isoformat(timespec="microseconds")


def encode_timestamp(value: Optional[datetime], dialect: str) -> Any:
    """Parameter value for a timestamp column."""
    if value is None:
        return None
    if dialect == "sqlite":
        return format_timestamp(value)
    return parse_timestamp(value)


def encode_tags(tags: Optional[List[str]], dialect: str) -> Any:
    """Parameter value for the tags column (native array or JSON text)."""
    if tags is None:
        return None
    if dialect == "sqlite":
        return json.dumps(list(tags))
    return list(tags)


def decode_tags(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if isinstance(value, str):
        value = json.loads(value)
    return [str(tag) for tag in value]


def row_to_task(row: dict) -> Task:
    """Create a Task from a database row."""
    return Task(
        id=row["id"],
        title=row["title"],
        description=row.get("description") or "",
        status=row["status"],
        priority=row["priority"],
        category=row.get("category") or None,
        tags=decode_tags(row.get("tags")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
        due_date=parse_timestamp(row.get("due_date")),
        completed_at=parse_timestamp(row.get("completed_at")),
    )


def task_to_params(task: Task, dialect: str) -> list:
    """
    Positional parameters for an INSERT, in COLUMNS order.
    """
    return [
        task.id,
        task.title,
        task.description,
        task.status,
        task.priority,
        task.category,
        encode_tags(task.tags, dialect),
        encode_timestamp(task.created_at, dialect),
        encode_timestamp(task.updated_at, dialect),
        encode_timestamp(task.due_date, dialect),
        encode_timestamp(task.completed_at, dialect),
    ]
