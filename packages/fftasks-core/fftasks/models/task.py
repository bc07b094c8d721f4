"""
Task model for fftasks.

Tasks are backlog items that agents create, filter, update and search
on behalf of a user.
"""

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from fftasks.errors import ValidationError


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    BLOCKED = "blocked"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Valid status values
TASK_STATUSES = tuple(s.value for s in TaskStatus)

# Valid priority values
TASK_PRIORITIES = tuple(p.value for p in TaskPriority)

# Sort rank for priority ordering (urgent first)
PRIORITY_RANK = {"urgent": 0, "high": 1, "medium": 2, "low": 3}

# Filter sentinel meaning "no constraint on this field"
ALL = "all"


class _Unset:
    """Marker for a field that was not specified at all."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def generate_task_id() -> str:
    return f"task_{uuid4().hex}"


def validate_status(status: str) -> str:
    if status not in TASK_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(TASK_STATUSES)}"
        )
    return status


def validate_priority(priority: str) -> str:
    if priority not in TASK_PRIORITIES:
        raise ValidationError(
            f"Invalid priority '{priority}'. Must be one of: {', '.join(TASK_PRIORITIES)}"
        )
    return priority


@dataclass
class Task:
    """
    A backlog task.

    Attributes:
        id: Opaque unique identifier, assigned once at creation
        title: Short human-readable label
        description: Free-text body (may be empty, never None)
        status: pending, in_progress, completed or blocked
        priority: low, medium, high or urgent
        category: Optional grouping label (e.g. "bug", "refactor")
        tags: Optional ordered list of labels
        created_at: When the task was created
        updated_at: When last modified
        due_date: Optional due date
        completed_at: When the task first reached completed
    """

    title: str
    description: str = ""
    id: str = field(default_factory=generate_task_id)
    status: str = "pending"
    priority: str = "medium"
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if self.created_at is None:
            self.created_at = utcnow()
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def is_complete(self) -> bool:
        return self.status == TaskStatus.COMPLETED.value

    @property
    def priority_rank(self) -> int:
        return PRIORITY_RANK[self.priority]

    def summary(self) -> dict:
        """Short form returned by add and update."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "priority": self.priority,
        }

    def to_dict(self) -> dict:
        """Convert to the external representation (camelCase, ISO timestamps)."""
        from fftasks.codec import format_timestamp

        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "category": self.category,
            "tags": list(self.tags) if self.tags is not None else None,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
            "dueDate": format_timestamp(self.due_date),
            "completedAt": format_timestamp(self.completed_at),
        }


@dataclass
class TaskUpdate:
    """
    Partial update input.

    Every field defaults to UNSET, meaning "leave unchanged". An explicit
    None is only meaningful for due_date, where it clears the value.
    """

    status: Union[str, Any] = UNSET
    priority: Union[str, Any] = UNSET
    description: Union[str, Any] = UNSET
    due_date: Union[datetime, str, None, Any] = UNSET

    def changes(self) -> Dict[str, Any]:
        """Only the fields that were specified."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    @property
    def is_empty(self) -> bool:
        return not self.changes()

    def validate(self) -> "TaskUpdate":
        """Reject out-of-range values before anything reaches the backend."""
        if self.status is not UNSET:
            if self.status is None:
                raise ValidationError("status cannot be cleared")
            validate_status(self.status)
        if self.priority is not UNSET:
            if self.priority is None:
                raise ValidationError("priority cannot be cleared")
            validate_priority(self.priority)
        if self.description is not UNSET and self.description is None:
            raise ValidationError("description cannot be cleared, use an empty string")
        return self
