# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Restore Manager - Restore a dump into its target database.

A restore always leaves the dump's contents authoritative:

- the target database exists: pg_restore --clean drops the old objects first
- it does not: createdb (template0, UTF8) then a plain pg_restore

The dump file is located and checked before anything touches the server.
"""

import os
import stat
from pathlib import Path

import aiofiles.os
import structlog
from ulid import ULID

from pgbr.catalog import database_exists
from pgbr.commands import createdb_args, restore_args
from pgbr.config import ConnectionConfig, ServiceSettings
from pgbr.errors import MESSAGE_BACKUP_FILE_NOT_FOUND
from pgbr.exceptions import BackupFileNotFoundError
from pgbr.process import CommandInvoker, invoke, raise_for_result
from pgbr.responses import ActionResponse, ok_response

logger = structlog.get_logger()

ACTION_RESTORE = "restore"


def _not_found(reference: str, reason: str) -> BackupFileNotFoundError:
    logger.warning("backup_file_rejected", reference=reference, reason=reason)
    return BackupFileNotFoundError(
        MESSAGE_BACKUP_FILE_NOT_FOUND,
        details={"reference": reference, "reason": reason},
    )


async def locate_backup_artifact(reference: str, backups_root: Path) -> Path:
    """
    Resolve a client-supplied dump name to a readable file under the root.

    Leading "/" and "." characters are stripped, the remainder is joined
    to the root and resolved, and the result must stay inside the root.
    Embedded traversal such as "a/../../etc" is caught by the resolution.

    Args:
        reference: Name from the request, relative to the backups root
        backups_root: Directory holding all dumps

    Returns:
        Absolute path of the dump file

    Raises:
        BackupFileNotFoundError: If the file is missing, escapes the root,
            is not a readable regular file, or cannot be checked
    """
    stripped = reference.lstrip("/.")
    if not stripped:
        raise _not_found(reference, "empty")

    root = backups_root.resolve()
    candidate = (root / stripped).resolve()

    if root not in candidate.parents:
        raise _not_found(reference, "outside_backups_root")

    try:
        info = await aiofiles.os.stat(candidate)
    except FileNotFoundError:
        raise _not_found(reference, "missing")
    except OSError as e:
        raise _not_found(reference, f"stat_failed: {e}")

    if not stat.S_ISREG(info.st_mode):
        raise _not_found(reference, "not_a_file")

    if not await aiofiles.os.access(candidate, os.R_OK):
        raise _not_found(reference, "unreadable")

    return candidate


async def create_database(
    config: ConnectionConfig,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> None:
    """
    Create config.database from template0 with UTF8 encoding.

    Raises:
        SubprocessError: If createdb fails
    """
    result = await invoker(
        settings.tools.createdb,
        createdb_args(config, settings.maintenance_db),
        secret=config.password,
        log_output=True,
        suppress_success_output=True,
        timeout=settings.command_timeout,
    )
    raise_for_result(result, "createdb execution error")


async def restore_dump(
    config: ConnectionConfig,
    artifact: Path,
    clean: bool,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> None:
    """
    Run pg_restore of artifact into config.database.

    Raises:
        SubprocessError: If pg_restore fails
    """
    result = await invoker(
        settings.tools.pg_restore,
        restore_args(config, artifact, clean),
        secret=config.password,
        log_output=True,
        suppress_success_output=True,
        timeout=settings.command_timeout,
    )
    raise_for_result(result, "restoreDb execution error")


async def run_restore(
    config: ConnectionConfig,
    artifact: Path,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> ActionResponse:
    """
    Restore a located dump into config.database.

    Args:
        config: Connection of the target database
        artifact: Dump file returned by locate_backup_artifact()
        settings: Service settings
        invoker: Command invoker

    Returns:
        ActionResponse with status ok and no file

    Raises:
        SubprocessError: If the existence check, createdb or pg_restore fails
        CommandTimeoutError: If any of them exceeds the command timeout
    """
    log = logger.bind(action=ACTION_RESTORE, operation_id=str(ULID()))
    log.info(
        "restore_started",
        host=config.host,
        database=config.database,
        file=str(artifact),
    )

    exists = await database_exists(config, settings, invoker)

    if exists:
        await restore_dump(config, artifact, True, settings, invoker)
    else:
        log.info("database_creating", database=config.database)
        await create_database(config, settings, invoker)
        await restore_dump(config, artifact, False, settings, invoker)

    log.info("restore_completed", database=config.database, created=not exists)
    return ok_response(ACTION_RESTORE)
