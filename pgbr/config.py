# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Configuration - Immutable configuration data structures.

All configuration is frozen (immutable) after creation so that the
process-wide settings can be shared between concurrent requests
without locking.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path

DEFAULT_PG_PORT = "5432"
DEFAULT_BACKUPS_ROOT = Path("/backups")
DEFAULT_COMMAND_TIMEOUT = 3600.0


class ActionStatus(str, Enum):
    """Value of the ``status`` field of every response."""

    OK = "ok"
    ERROR = "error"
    SKIPPED = "skipped"  # Placeholder for actions that are intentionally not run


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Connection parameters for one PostgreSQL database.

    The password is only ever handed to child processes through their
    environment, so it is kept out of repr() as well.
    """

    host: str
    database: str
    user: str
    port: str = DEFAULT_PG_PORT
    password: str = field(default="", repr=False)

    def is_complete(self) -> bool:
        """Host, database and user are required; port and password are not."""
        return bool(self.host and self.database and self.user)


@dataclass(frozen=True)
class ToolPaths:
    """Executables of the PostgreSQL client utilities."""

    psql: str = "psql"
    pg_dump: str = "pg_dump"
    pg_restore: str = "pg_restore"
    createdb: str = "createdb"

    def all(self) -> list[str]:
        return [self.psql, self.pg_dump, self.pg_restore, self.createdb]


@dataclass(frozen=True)
class ServiceSettings:
    """
    Immutable process-wide settings.

    Built once before the server starts serving and shared read-only by
    every request.
    """

    # Connection used by GET triggers, None when PG_* variables are incomplete
    env_defaults: ConnectionConfig | None = None

    # Nest dumps under <root>/<host>/<db>/ instead of <root>/<host>_<db>_...
    use_dir_structure: bool = False

    # Directory holding all dump files
    backups_root: Path = field(default_factory=lambda: DEFAULT_BACKUPS_ROOT)

    # Seconds before an external tool is killed, None for no limit
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT

    # Database psql and createdb connect to when inspecting the server
    maintenance_db: str = "postgres"

    tools: ToolPaths = field(default_factory=ToolPaths)

    listen_host: str = "0.0.0.0"
    listen_port: int = 80

    # Log level name and renderer ("console" or "json")
    log_level: str = "INFO"
    log_format: str = "console"

    def with_updates(self, **kwargs) -> "ServiceSettings":
        """
        Create new settings with updated values.

        Since the settings are frozen, this creates a new instance.
        """
        return replace(self, **kwargs)
