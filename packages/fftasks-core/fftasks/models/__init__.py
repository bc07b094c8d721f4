"""
Core data models for fftasks.
"""

from fftasks.models.outcome import Outcome
from fftasks.models.task import (
    ALL,
    PRIORITY_RANK,
    TASK_PRIORITIES,
    TASK_STATUSES,
    UNSET,
    Task,
    TaskPriority,
    TaskStatus,
    TaskUpdate,
)

__all__ = [
    "ALL",
    "Outcome",
    "PRIORITY_RANK",
    "TASK_PRIORITIES",
    "TASK_STATUSES",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskUpdate",
    "UNSET",
]
