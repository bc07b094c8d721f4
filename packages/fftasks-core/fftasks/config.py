"""
fftasks Configuration

Loads settings from ~/.fftasks/config.yaml with environment variable overrides.
Supports both PostgreSQL and SQLite database configurations.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import os
import logging
import sys

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".fftasks"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Checked in order; the first one set selects PostgreSQL
DATABASE_URL_ENV_VARS = ("FFTASKS_DATABASE_URL", "POSTGRES_URL", "DATABASE_URL")

UNCONFIGURED_MESSAGE = (
    "Database not configured. Set POSTGRES_URL or DATABASE_URL environment variable."
)


@dataclass
class DatabaseConfig:
    """Database configuration settings."""

    type: str = "postgres"  # "postgres" or "sqlite"
    sqlite_path: str = "~/.fftasks/tasks.db"
    postgres_url: Optional[str] = None
    connect_timeout: float = 10.0
    command_timeout: float = 30.0
    max_results: int = 500

    @property
    def is_configured(self) -> bool:
        """SQLite always resolves; PostgreSQL needs a URL."""
        if self.type.lower() == "sqlite":
            return bool(self.sqlite_path)
        return bool(self.postgres_url)


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"


@dataclass
class FFTasksConfig:
    """
    Complete fftasks configuration.

    Loaded from ~/.fftasks/config.yaml with environment variable overrides.
    """

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary for display (masks secrets)."""
        result = asdict(self)

        # Mask database URL
        if result.get("database", {}).get("postgres_url"):
            url = result["database"]["postgres_url"]
            result["database"]["postgres_url"] = url[:30] + "..." if len(url) > 30 else "***"

        return result


def _parse_database_config(data: dict) -> DatabaseConfig:
    """Parse database configuration from YAML data."""
    db_data = data.get("database") or {}
    defaults = DatabaseConfig()

    # SQLite config
    sqlite_config = db_data.get("sqlite") or {}
    sqlite_path = sqlite_config.get("path", defaults.sqlite_path)

    # PostgreSQL config
    postgres_config = db_data.get("postgres") or {}
    postgres_url = postgres_config.get("url")

    # Check for URL from environment variable reference
    url_env = postgres_config.get("url_env")
    if url_env and not postgres_url:
        postgres_url = os.environ.get(url_env)

    return DatabaseConfig(
        type=db_data.get("type", defaults.type),
        sqlite_path=sqlite_path,
        postgres_url=postgres_url,
        connect_timeout=float(db_data.get("connect_timeout", defaults.connect_timeout)),
        command_timeout=float(db_data.get("command_timeout", defaults.command_timeout)),
        max_results=int(db_data.get("max_results", defaults.max_results)),
    )


def _parse_logging_config(data: dict) -> LoggingConfig:
    """Parse logging configuration from YAML data."""
    logging_data = data.get("logging") or {}
    return LoggingConfig(level=str(logging_data.get("level", "INFO")).upper())


def load_config(config_path: Optional[Path] = None) -> FFTasksConfig:
    """
    Load configuration from file with environment variable overrides.

    Args:
        config_path: Optional path to config file. Defaults to ~/.fftasks/config.yaml

    Returns:
        FFTasksConfig instance
    """
    config_file = config_path or CONFIG_FILE
    config = FFTasksConfig()

    if config_file.exists():
        try:
            with open(config_file, 'r') as f:
                data = yaml.safe_load(f) or {}

            config.database = _parse_database_config(data)
            config.logging = _parse_logging_config(data)

        except yaml.YAMLError as e:
            logger.warning(f"Could not parse config file at {config_file}: {e}")
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected error loading config from {config_file}: {e}")

    # Environment variable overrides
    for env_var in DATABASE_URL_ENV_VARS:
        if os.environ.get(env_var):
            config.database.type = "postgres"
            config.database.postgres_url = os.environ[env_var]
            break
    else:
        if os.environ.get("FFTASKS_SQLITE_PATH"):
            config.database.type = "sqlite"
            config.database.sqlite_path = os.environ["FFTASKS_SQLITE_PATH"]

    if os.environ.get("FFTASKS_LOG_LEVEL"):
        config.logging.level = os.environ["FFTASKS_LOG_LEVEL"].upper()

    if not config.database.is_configured:
        logger.warning("POSTGRES_URL or DATABASE_URL not set, task tools will report unconfigured")

    return config


def setup_logging(level: str = "INFO") -> None:
    """
    Send log records to stderr.

    stdout carries the MCP protocol, so nothing may be logged there.
    """
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
