"""
fftasks MCP Server

Exposes the task backlog to agents as MCP tools. Every tool returns the
operation's Outcome as a dict with an explicit ``success`` flag.
"""

import asyncio
import logging
from typing import Optional, List

from mcp.server.fastmcp import FastMCP

from fftasks.config import load_config, setup_logging
from fftasks.db.provider import ConnectionProvider
from fftasks.models.task import UNSET
from fftasks.services.tasks import TaskService

logger = logging.getLogger(__name__)


def _given(value):
    """MCP clients send None for omitted arguments."""
    return UNSET if value is None else value


def create_server(service: TaskService) -> FastMCP:
    """
    Build the MCP server with the task tools bound to ``service``.

    Args:
        service: TaskService sharing the process-wide ConnectionProvider
    """
    mcp = FastMCP("fftasks")

    # =========================================================================
    # TASK TOOLS
    # =========================================================================

    @mcp.tool()
    async def add_task(
        title: str,
        description: str,
        priority: str = "medium",
        category: Optional[str] = None,
        tags: Optional[List[str]] = None,
        due_date: Optional[str] = None,
    ) -> dict:
        """
        Add a new task to the task list with title, description, priority, and category.

        Args:
            title: Short task title
            description: Detailed task description
            priority: low, medium, high or urgent (default medium)
            category: Task category (e.g., 'refactor', 'bug', 'feature')
            tags: Tags for organization
            due_date: Due date (ISO format)

        Returns:
            success, message and the created task summary
        """
        outcome = await service.add(
            title=title,
            description=description,
            priority=priority,
            category=category,
            tags=tags,
            due_date=due_date,
        )
        return outcome.to_dict()

    @mcp.tool()
    async def list_tasks(
        status: str = "all",
        priority: str = "all",
        category: Optional[str] = None,
        sort_by: str = "priority",
    ) -> dict:
        """
        List all tasks with optional filters by status, priority, or category.

        Args:
            status: pending, in_progress, completed, blocked or all
            priority: low, medium, high, urgent or all
            category: Filter by category
            sort_by: priority, created_at or updated_at

        Returns:
            success, summary message, tasks and total
        """
        outcome = await service.list(
            status=status,
            priority=priority,
            category=category,
            sort_by=sort_by,
        )
        return outcome.to_dict()

    @mcp.tool()
    async def get_task(task_id: str) -> dict:
        """
        Get detailed information about a specific task by ID.

        Args:
            task_id: Task ID to retrieve

        Returns:
            success, message and the full task
        """
        outcome = await service.get(task_id)
        return outcome.to_dict()

    @mcp.tool()
    async def update_task(
        task_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        description: Optional[str] = None,
        due_date: Optional[str] = None,
        clear_due_date: bool = False,
        notes: Optional[str] = None,
    ) -> dict:
        """
        Update task status, priority, description, or due date.

        Only the fields given are changed. Marking a task completed stamps
        its completion time the first time only.

        Args:
            task_id: Task ID to update
            status: pending, in_progress, completed or blocked
            priority: low, medium, high or urgent
            description: Updated description
            due_date: New due date (ISO format)
            clear_due_date: Remove the due date
            notes: Additional notes for the confirmation message

        Returns:
            success, message and the updated task summary
        """
        outcome = await service.update(
            task_id,
            status=_given(status),
            priority=_given(priority),
            description=_given(description),
            due_date=None if clear_due_date else _given(due_date),
            notes=notes,
        )
        return outcome.to_dict()

    @mcp.tool()
    async def search_tasks(query: str, search_in: str = "both") -> dict:
        """
        Search tasks by text in title, description, or tags.

        Args:
            query: Search query (case-insensitive substring)
            search_in: title, description, tags or both (title or description)

        Returns:
            success, message, matching tasks and total
        """
        outcome = await service.search(query, search_in=search_in)
        return outcome.to_dict()

    @mcp.tool()
    async def delete_task(task_id: str) -> dict:
        """
        Delete a task by ID.

        Args:
            task_id: Task ID to delete

        Returns:
            success and a message naming the deleted task
        """
        outcome = await service.delete(task_id)
        return outcome.to_dict()

    # =========================================================================
    # UTILITY TOOLS
    # =========================================================================

    @mcp.tool()
    async def tasks_health() -> dict:
        """
        Check database configuration and connectivity.

        Returns:
            success and a message with the backend type and task count
        """
        outcome = await service.health()
        return outcome.to_dict()

    return mcp


# =============================================================================
# CLI ENTRY POINT
# =============================================================================

def main():
    """Main entry point for fftasks-mcp command."""
    import argparse

    parser = argparse.ArgumentParser(description="fftasks MCP Server")
    parser.add_argument(
        "command", nargs="?", default="serve",
        choices=["serve", "init-schema"],
        help="Command to run (serve, init-schema)",
    )
    args = parser.parse_args()

    config = load_config()
    setup_logging(config.logging.level)

    provider = ConnectionProvider(config)
    service = TaskService(provider)

    if args.command == "init-schema":
        async def do_init():
            try:
                adapter = await provider.get_adapter()
                if adapter is None:
                    print("Database not configured")
                    return 1
                print("Schema ready" if provider.schema_ok else "Schema bootstrap failed, see log")
                return 0 if provider.schema_ok else 1
            finally:
                await provider.close()

        raise SystemExit(asyncio.run(do_init()))

    logger.info(f"Starting fftasks MCP server: {config.to_dict()['database']}")
    create_server(service).run()


if __name__ == "__main__":
    main()
