# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PG Backup Restore - Trigger PostgreSQL backup and restore over HTTP.

Runs pg_dump, pg_restore, createdb and psql as subprocesses on behalf of
HTTP requests and reports every outcome in one JSON shape. Package name: pgbr.
"""

__version__ = "0.1.0"

# Settings (user-facing API)
from pgbr.config import ConnectionConfig, ServiceSettings, ToolPaths
from pgbr.env import load_settings_from_env

# Orchestration
from pgbr.backup import locate_backup_artifact, run_backup, run_restore

__all__ = [
    # Version
    "__version__",
    # Settings
    "ConnectionConfig",
    "ServiceSettings",
    "ToolPaths",
    "load_settings_from_env",
    # Orchestration
    "run_backup",
    "run_restore",
    "locate_backup_artifact",
]
