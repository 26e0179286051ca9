# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Backup Manager - Dump a database into the backups root.

Dump files are named by host, database and a one-second timestamp:

    <root>/<host>_<db>_<YYYYMMDD_HHMMSS>.dump      (flat layout)
    <root>/<host>/<db>/<YYYYMMDD_HHMMSS>.dump      (directory layout)

Creating the dump and removing it after a failed pg_dump are two separate
steps: a crash in between can leave a partial file behind.
"""

from datetime import datetime
from pathlib import Path

import aiofiles.os
import structlog
from ulid import ULID

from pgbr.commands import dump_args
from pgbr.config import ConnectionConfig, ServiceSettings
from pgbr.errors import MESSAGE_IO_ERROR, explain_backup_path_outside_root
from pgbr.exceptions import MalformedInputError, StorageError
from pgbr.process import CommandInvoker, invoke, raise_for_result
from pgbr.responses import ActionResponse, ok_response

logger = structlog.get_logger()

ACTION_BACKUP = "backup"
TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
DUMP_SUFFIX = ".dump"


def backup_file_path(
    config: ConnectionConfig,
    backups_root: Path,
    use_dir_structure: bool,
    now: datetime,
) -> Path:
    """
    Compute where a dump of config.database taken at now is written.

    Args:
        config: Connection of the database being dumped
        backups_root: Directory holding all dumps
        use_dir_structure: Nest the file under <host>/<db>/
        now: Time of the backup

    Returns:
        Path of the dump file (not created)
    """
    timestamp = now.strftime(TIMESTAMP_FORMAT)
    if use_dir_structure:
        return backups_root / config.host / config.database / f"{timestamp}{DUMP_SUFFIX}"
    return backups_root / f"{config.host}_{config.database}_{timestamp}{DUMP_SUFFIX}"


async def prepare_backup_path(
    config: ConnectionConfig,
    settings: ServiceSettings,
    now: datetime | None = None,
) -> Path:
    """
    Compute the dump path and create its parent directory.

    Raises:
        MalformedInputError: If host or database would leave the backups root
        StorageError: If the directory cannot be created
    """
    file_path = backup_file_path(
        config, settings.backups_root, settings.use_dir_structure, now or datetime.now()
    )

    # An absolute or "../" name would otherwise escape the root
    if settings.backups_root.resolve() not in file_path.resolve().parents:
        logger.warning(
            "backup_path_outside_root",
            host=config.host,
            database=config.database,
            path=str(file_path),
        )
        raise MalformedInputError(
            explain_backup_path_outside_root(config.host, config.database),
            details={"path": str(file_path)},
        )

    try:
        await aiofiles.os.makedirs(file_path.parent, exist_ok=True)
    except OSError as e:
        logger.error(
            "backup_directory_create_failed",
            path=str(file_path.parent),
            error=str(e),
        )
        raise StorageError(
            MESSAGE_IO_ERROR,
            details={"path": str(file_path.parent), "error": str(e)},
        ) from e

    return file_path


async def _remove_partial_dump(file_path: Path) -> None:
    try:
        await aiofiles.os.remove(file_path)
        logger.info("partial_dump_removed", file=str(file_path))
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("partial_dump_remove_failed", file=str(file_path), error=str(e))


async def run_backup(
    config: ConnectionConfig,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
    now: datetime | None = None,
) -> ActionResponse:
    """
    Dump config.database into the backups root with pg_dump.

    Args:
        config: Connection of the database to dump
        settings: Service settings (root, layout, tools, timeout)
        invoker: Command invoker
        now: Time used for the file name (default: current local time)

    Returns:
        ActionResponse with status ok and the dump path as file

    Raises:
        StorageError: If the destination directory cannot be created
        SubprocessError: If pg_dump fails (the partial dump is removed)
        CommandTimeoutError: If pg_dump exceeds the command timeout
    """
    log = logger.bind(action=ACTION_BACKUP, operation_id=str(ULID()))

    file_path = await prepare_backup_path(config, settings, now)

    log.info(
        "backup_started",
        host=config.host,
        database=config.database,
        file=str(file_path),
    )

    result = await invoker(
        settings.tools.pg_dump,
        dump_args(config, file_path),
        secret=config.password,
        log_output=True,
        suppress_success_output=True,
        timeout=settings.command_timeout,
    )

    if not result.succeeded:
        await _remove_partial_dump(file_path)
        log.error("backup_failed", file=str(file_path), timed_out=result.timed_out)
        raise_for_result(result)

    log.info("backup_completed", file=str(file_path))
    return ok_response(ACTION_BACKUP, file=str(file_path))
