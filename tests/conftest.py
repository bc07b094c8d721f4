"""
Pytest configuration and fixtures for fftasks tests.
"""

import asyncio
import pytest
import sys
from pathlib import Path

# Configure pytest-asyncio
pytest_plugins = ["pytest_asyncio"]

# Add packages to path for testing
packages_dir = Path(__file__).parent.parent / "packages"
sys.path.insert(0, str(packages_dir / "fftasks-core"))
sys.path.insert(0, str(packages_dir / "fftasks-mcp"))

from fftasks.db.interface import DatabaseAdapter  # noqa: E402


class FailingAdapter(DatabaseAdapter):
    """Adapter whose every statement fails, as a broken backend would."""

    def __init__(self, error: Exception | None = None):
        self.error = error or RuntimeError("connection reset by peer")
        self.connected = False

    async def connect(self) -> None:
        self.connected = True

    async def close(self) -> None:
        self.connected = False

    async def execute(self, query, *args):
        raise self.error

    async def fetch(self, query, *args):
        raise self.error

    async def fetchrow(self, query, *args):
        raise self.error

    async def fetchval(self, query, *args):
        raise self.error

    @property
    def dialect(self) -> str:
        return "sqlite"

    @property
    def placeholder_style(self) -> str:
        return "qmark"


class RecordingAdapter(FailingAdapter):
    """Adapter that accepts everything and records statements with their arguments."""

    def __init__(self):
        super().__init__()
        self.statements = []
        self.connect_calls = 0

    async def connect(self) -> None:
        self.connect_calls += 1
        self.connected = True

    async def execute(self, query, *args):
        self.statements.append((query, args))
        return "UPDATE 0" if query.startswith("UPDATE") else "OK"

    async def fetch(self, query, *args):
        self.statements.append((query, args))
        return []

    async def fetchrow(self, query, *args):
        self.statements.append((query, args))
        return None

    async def fetchval(self, query, *args):
        self.statements.append((query, args))
        return 0


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory."""
    config_dir = tmp_path / ".fftasks"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def sqlite_config(tmp_path):
    """Configuration pointing at a temporary SQLite database."""
    from fftasks.config import DatabaseConfig, FFTasksConfig

    return FFTasksConfig(
        database=DatabaseConfig(type="sqlite", sqlite_path=str(tmp_path / "tasks.db"))
    )


@pytest.fixture
async def provider(sqlite_config):
    """ConnectionProvider backed by a temporary SQLite database."""
    from fftasks.db.provider import ConnectionProvider

    provider = ConnectionProvider(sqlite_config)
    yield provider
    await provider.close()


@pytest.fixture
async def task_service(provider):
    """TaskService with a temporary SQLite database."""
    from fftasks.services.tasks import TaskService

    return TaskService(provider)


@pytest.fixture
def unconfigured_service():
    """TaskService with no backend endpoint configured."""
    from fftasks.config import FFTasksConfig
    from fftasks.db.provider import ConnectionProvider
    from fftasks.services.tasks import TaskService

    return TaskService(ConnectionProvider(FFTasksConfig()))


@pytest.fixture
def failing_adapter():
    return FailingAdapter()


@pytest.fixture
def timeout_adapter():
    return FailingAdapter(asyncio.TimeoutError())


@pytest.fixture
def recording_adapter():
    return RecordingAdapter()


@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {
        "title": "Fix login",
        "description": "Auth broken on Safari",
        "priority": "high",
        "category": "bug",
        "tags": ["auth", "safari"],
    }
