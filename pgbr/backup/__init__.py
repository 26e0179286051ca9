# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Backup Engine - pg_dump and pg_restore orchestration.
"""

from pgbr.backup.manager import (
    backup_file_path,
    prepare_backup_path,
    run_backup,
)

from pgbr.backup.restore import (
    create_database,
    locate_backup_artifact,
    restore_dump,
    run_restore,
)

__all__ = [
    # Manager
    "backup_file_path",
    "prepare_backup_path",
    "run_backup",
    # Restore
    "create_database",
    "locate_backup_artifact",
    "restore_dump",
    "run_restore",
]
