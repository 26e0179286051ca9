# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Catalog - Boolean queries against the server catalog through psql.

psql only speaks text here, so the answer is parsed by an exact match:
a query is true only when its whole trimmed output is the literal "1".
Partial or garbled output is never read as true.
"""

import structlog

from pgbr.commands import psql_query_args, quote_literal
from pgbr.config import ConnectionConfig, ServiceSettings
from pgbr.process import CommandInvoker, invoke, raise_for_result

logger = structlog.get_logger()

TRUE_OUTPUT = "1"


def parse_boolean_output(output: str) -> bool:
    return output.strip() == TRUE_OUTPUT


async def query_boolean(
    config: ConnectionConfig,
    sql: str,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> bool:
    """
    Run a single-row query and interpret its output as a boolean.

    Raises:
        SubprocessError: If psql fails
        CommandTimeoutError: If psql exceeds the command timeout
    """
    result = await invoker(
        settings.tools.psql,
        psql_query_args(config, settings.maintenance_db, sql),
        secret=config.password,
        log_output=True,
        suppress_success_output=False,
        timeout=settings.command_timeout,
    )
    raise_for_result(result, "psql check DB exist execution error")
    return parse_boolean_output(result.output)


async def database_exists(
    config: ConnectionConfig,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> bool:
    """Check pg_database for config.database."""
    sql = f"SELECT 1 FROM pg_database WHERE datname={quote_literal(config.database)}"
    exists = await query_boolean(config, sql, settings, invoker)
    logger.info("database_existence_checked", host=config.host, database=config.database, exists=exists)
    return exists
