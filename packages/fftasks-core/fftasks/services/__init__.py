"""
Business logic services for fftasks.
"""

from fftasks.services.tasks import TaskService

__all__ = [
    "TaskService",
]
