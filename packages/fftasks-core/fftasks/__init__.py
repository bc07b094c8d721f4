"""
fftasks Core Library

Durable task backlog for conversational agents, on PostgreSQL or SQLite.
"""

__version__ = "0.1.0"

from fftasks.config import FFTasksConfig, load_config
from fftasks.db import ConnectionProvider, DatabaseAdapter
from fftasks.models import Outcome, Task, TaskUpdate, UNSET
from fftasks.services import TaskService

__all__ = [
    "load_config",
    "FFTasksConfig",
    "ConnectionProvider",
    "DatabaseAdapter",
    "Outcome",
    "Task",
    "TaskService",
    "TaskUpdate",
    "UNSET",
]
