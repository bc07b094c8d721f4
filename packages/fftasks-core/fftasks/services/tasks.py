"""
Task Service for fftasks.

Add, get, list, search, update and delete backlog tasks on PostgreSQL or
SQLite. Every operation returns an Outcome; configuration, validation,
lookup and backend failures are all reported there instead of raised.

Each operation is one statement, or a short fixed sequence, with no
transaction spanning operations. Two concurrent updates of the same task
race and the last one to commit wins; there is no version check.
"""

import logging
from datetime import datetime
from typing import Any, Awaitable, List, Union

from fftasks.codec import encode_timestamp, parse_timestamp, row_to_task, task_to_params
from fftasks.config import UNCONFIGURED_MESSAGE
from fftasks.db.interface import DatabaseAdapter, affected_rows
from fftasks.db.provider import ConnectionProvider
from fftasks.db.query import (
    TABLE,
    SearchField,
    SortKey,
    UpdateStatement,
    build_delete,
    build_get,
    build_insert,
    build_list_query,
    build_search_query,
)
from fftasks.errors import (
    BackendError,
    ConfigurationError,
    NotFoundError,
    TaskStoreError,
    ValidationError,
)
from fftasks.models.outcome import Outcome
from fftasks.models.task import (
    ALL,
    UNSET,
    Task,
    TaskUpdate,
    utcnow,
    validate_priority,
)

logger = logging.getLogger(__name__)


class TaskService:
    """
    Service for managing backlog tasks.

    Operations share one injected ConnectionProvider.
    """

    def __init__(self, provider: ConnectionProvider):
        """
        Initialize task service.

        Args:
            provider: ConnectionProvider built once by the hosting process
        """
        self.provider = provider

    async def _adapter(self) -> DatabaseAdapter:
        adapter = await self.provider.get_adapter()
        if adapter is None:
            raise ConfigurationError(UNCONFIGURED_MESSAGE)
        return adapter

    async def _guard(self, action: str, operation: Awaitable[Outcome]) -> Outcome:
        """
        Await an operation and turn any failure into an Outcome.

        Args:
            action: What was attempted, e.g. "add task", for messages and logs
            operation: Coroutine producing the success Outcome
        """
        try:
            return await operation
        except (ConfigurationError, NotFoundError, ValidationError) as e:
            logger.info(f"Could not {action}: {e.message}")
            return Outcome.failure(e)
        except TaskStoreError as e:
            logger.error(f"Error trying to {action}: {e.message}")
            return Outcome.failure(e)
        except Exception as e:
            reason = str(e) or type(e).__name__
            logger.error(f"Error trying to {action}: {reason}")
            return Outcome.failure(BackendError(f"Failed to {action}: {reason}"))

    # =========================================================================
    # ADD
    # =========================================================================

    async def add(
        self,
        title: str,
        description: str,
        priority: str = "medium",
        category: str | None = None,
        tags: list[str] | None = None,
        due_date: datetime | str | None = None,
    ) -> Outcome:
        """
        Create a new task with status pending.

        Args:
            title: Short task title (non-empty)
            description: Detailed description (may be empty)
            priority: low, medium, high or urgent
            category: Optional category (e.g. "refactor", "bug", "feature")
            tags: Optional tags for organization
            due_date: Optional due date (datetime or ISO-8601 string)

        Returns:
            Outcome with the created task summary
        """
        return await self._guard(
            "add task",
            self._add(title, description, priority, category, tags, due_date),
        )

    async def _add(self, title, description, priority, category, tags, due_date) -> Outcome:
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Task title is required")
        if description is None:
            raise ValidationError("Task description is required (use an empty string for none)")
        if priority is None:
            priority = "medium"
        validate_priority(priority)
        if tags is not None and not all(isinstance(tag, str) for tag in tags):
            raise ValidationError("Tags must be strings")

        task = Task(
            title=title,
            description=description,
            status="pending",
            priority=priority,
            category=category or None,
            tags=list(tags) if tags is not None else None,
            due_date=parse_timestamp(due_date),
        )

        adapter = await self._adapter()
        await adapter.execute(build_insert(), *task_to_params(task, adapter.dialect))

        logger.info(f"Created task: {task.id} - {task.title}")
        return Outcome.ok(f'Task added: "{task.title}" [{task.priority}]', task=task.summary())

    # =========================================================================
    # GET
    # =========================================================================

    async def get(self, task_id: str) -> Outcome:
        """Get the full record of one task."""
        return await self._guard("get task", self._get(task_id))

    async def _fetch_task(self, adapter: DatabaseAdapter, task_id: str) -> Task:
        sql, params = build_get(task_id, adapter.dialect)
        row = await adapter.fetchrow(sql, *params)
        if row is None:
            raise NotFoundError(task_id)
        return row_to_task(row)

    async def _get(self, task_id: str) -> Outcome:
        adapter = await self._adapter()
        task = await self._fetch_task(adapter, task_id)
        return Outcome.ok(f"Task retrieved: {task.title}", task=task.to_dict())

    # =========================================================================
    # LIST
    # =========================================================================

    async def list(
        self,
        status: str | None = ALL,
        priority: str | None = ALL,
        category: str | None = None,
        sort_by: Union[str, SortKey] = SortKey.PRIORITY,
        limit: int | None = None,
    ) -> Outcome:
        """
        List tasks with optional filters.

        Args:
            status: Filter by status, or "all"
            priority: Filter by priority, or "all"
            category: Filter by category
            sort_by: priority (urgent first, newest first within a rank),
                     created_at or updated_at (newest first)
            limit: Max results (defaults to the configured max_results)

        Returns:
            Outcome with the matching tasks
        """
        return await self._guard(
            "list tasks",
            self._list(status, priority, category, sort_by, limit),
        )

    async def _list(self, status, priority, category, sort_by, limit) -> Outcome:
        query = build_list_query(
            status=status,
            priority=priority,
            category=category,
            sort_by=sort_by,
            limit=limit or self.provider.max_results,
        )

        adapter = await self._adapter()
        sql, params = query.compile(adapter.dialect)
        rows = await adapter.fetch(sql, *params)
        tasks = [row_to_task(row) for row in rows]

        summary = f"Found {len(tasks)} task(s)"
        if status not in (None, ALL):
            summary += f" with status '{status}'"
        if priority not in (None, ALL):
            summary += f" with priority '{priority}'"
        if category:
            summary += f" in category '{category}'"

        return Outcome.ok(summary, tasks=[t.to_dict() for t in tasks])

    # =========================================================================
    # SEARCH
    # =========================================================================

    async def search(
        self,
        query: str,
        search_in: Union[str, SearchField] = SearchField.BOTH,
        limit: int | None = None,
    ) -> Outcome:
        """
        Case-insensitive substring search, newest first.

        Args:
            query: Text to look for
            search_in: title, description, tags, or both (title or description)
            limit: Max results (defaults to the configured max_results)
        """
        return await self._guard("search tasks", self._search(query, search_in, limit))

    async def _search(self, query, search_in, limit) -> Outcome:
        select = build_search_query(query, search_in, limit=limit or self.provider.max_results)

        adapter = await self._adapter()
        sql, params = select.compile(adapter.dialect)
        rows = await adapter.fetch(sql, *params)

        matches = []
        for row in rows:
            task = row_to_task(row)
            matches.append({
                "id": task.id,
                "title": task.title,
                "description": task.description,
                "status": task.status,
                "priority": task.priority,
            })

        return Outcome.ok(f'Found {len(matches)} task(s) matching "{query}"', tasks=matches)

    # =========================================================================
    # UPDATE
    # =========================================================================

    async def update(
        self,
        task_id: str,
        status: Any = UNSET,
        priority: Any = UNSET,
        description: Any = UNSET,
        due_date: Any = UNSET,
        notes: str | None = None,
    ) -> Outcome:
        """
        Update only the fields given; omitted fields stay as they are.

        Args:
            task_id: Task ID
            status: New status
            priority: New priority
            description: New description
            due_date: New due date, or None to clear it
            notes: Free-text note echoed in the message (not stored)

        Returns:
            Outcome with the updated task summary and updatedAt
        """
        changes = TaskUpdate(
            status=status,
            priority=priority,
            description=description,
            due_date=due_date,
        )
        return await self.apply(task_id, changes, notes=notes)

    async def apply(self, task_id: str, changes: TaskUpdate, notes: str | None = None) -> Outcome:
        """Apply a prebuilt TaskUpdate."""
        return await self._guard("update task", self._apply(task_id, changes, notes))

    async def _apply(self, task_id: str, changes: TaskUpdate, notes: str | None) -> Outcome:
        values = changes.validate().changes()
        if "due_date" in values:
            values["due_date"] = parse_timestamp(values["due_date"])

        adapter = await self._adapter()
        dialect = adapter.dialect

        encoded = {
            column: encode_timestamp(value, dialect) if column == "due_date" else value
            for column, value in values.items()
        }
        statement = UpdateStatement(
            task_id=task_id,
            changes=encoded,
            now=encode_timestamp(utcnow(), dialect),
        )

        sql, params = statement.compile(dialect)
        result = await adapter.execute(sql, *params)
        if affected_rows(result) == 0:
            raise NotFoundError(task_id)

        task = await self._fetch_task(adapter, task_id)

        updates: List[str] = []
        if "status" in values:
            updates.append(f"status → {values['status']}")
        if "priority" in values:
            updates.append(f"priority → {values['priority']}")
        if "description" in values:
            updates.append("description updated")
        if "due_date" in values:
            updates.append("due date cleared" if values["due_date"] is None else "due date updated")
        if notes:
            updates.append(f"notes: {notes}")

        payload = task.summary()
        payload["updatedAt"] = task.to_dict()["updatedAt"]

        return Outcome.ok(
            f"Task updated: {task.title} ({', '.join(updates) or 'no changes'})",
            task=payload,
        )

    # =========================================================================
    # DELETE
    # =========================================================================

    async def delete(self, task_id: str) -> Outcome:
        """Permanently remove a task, reporting its title."""
        return await self._guard("delete task", self._delete(task_id))

    async def _delete(self, task_id: str) -> Outcome:
        adapter = await self._adapter()
        task = await self._fetch_task(adapter, task_id)

        sql, params = build_delete(task_id)
        result = await adapter.execute(sql, *params)
        if affected_rows(result) == 0:
            # Removed by someone else between the read and the delete
            raise NotFoundError(task_id)

        logger.info(f"Deleted task: {task.id} - {task.title}")
        return Outcome.ok(f"Task deleted: {task.title}", task=task.summary())

    # =========================================================================
    # HEALTH
    # =========================================================================

    async def health(self) -> Outcome:
        """Report whether the backend is reachable and how many tasks it holds."""
        return await self._guard("check task store", self._health())

    async def _health(self) -> Outcome:
        adapter = await self._adapter()
        count = await adapter.fetchval(f"SELECT COUNT(*) FROM {TABLE}")
        schema = "ok" if self.provider.schema_ok else "bootstrap failed"
        return Outcome.ok(f"Connected ({adapter.dialect}), schema {schema}, {count} task(s)")
