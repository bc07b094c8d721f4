"""
Structured result returned by every task operation.
"""

from dataclasses import dataclass
from typing import List, Optional

from fftasks.errors import TaskStoreError


@dataclass
class Outcome:
    """
    Success flag, human-readable message and optional payload.

    Callers must check ``success``; operations never raise.

    Attributes:
        success: Whether the operation succeeded
        message: Short plain-text message for the user
        error: Error kind on failure (configuration, not_found, backend, validation)
        task: Single-record payload
        tasks: Multi-record payload
    """

    success: bool
    message: str
    error: Optional[str] = None
    task: Optional[dict] = None
    tasks: Optional[List[dict]] = None

    @classmethod
    def ok(cls, message: str, task: Optional[dict] = None, tasks: Optional[List[dict]] = None) -> "Outcome":
        return cls(success=True, message=message, task=task, tasks=tasks)

    @classmethod
    def failure(cls, error: TaskStoreError) -> "Outcome":
        return cls(success=False, message=error.message, error=error.kind)

    @property
    def total(self) -> int:
        return len(self.tasks) if self.tasks is not None else 0

    def to_dict(self) -> dict:
        """Convert to a plain dict for the tool surface."""
        result = {"success": self.success, "message": self.message}
        if self.error is not None:
            result["error"] = self.error
        if self.task is not None:
            result["task"] = self.task
            result["taskId"] = self.task.get("id")
        if self.tasks is not None:
            result["tasks"] = self.tasks
            result["total"] = self.total
        return result
