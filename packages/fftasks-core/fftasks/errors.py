"""
Error taxonomy for fftasks.

Every error carries a short ``kind`` string that ends up in the
``error`` field of an Outcome, so callers can branch without parsing
messages.
"""


class TaskStoreError(Exception):
    """Base class for all task store errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(TaskStoreError):
    """No backend endpoint could be resolved."""

    kind = "configuration"


class NotFoundError(TaskStoreError):
    """No task exists with the requested id."""

    kind = "not_found"

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class BackendError(TaskStoreError):
    """A statement failed against the backend (connectivity, constraint, timeout)."""

    kind = "backend"


class ValidationError(TaskStoreError):
    """Input rejected before any statement was issued."""

    kind = "validation"
