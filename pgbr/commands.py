# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Argument lists for the PostgreSQL client utilities.

These are pure functions: they never include the password, which is
passed separately to the process invoker.
"""

from pathlib import Path
from typing import List

from pgbr.config import ConnectionConfig


def connection_args(config: ConnectionConfig) -> List[str]:
    """Host, port, user and --no-password, shared by every tool."""
    return [
        "-h", config.host,
        "-p", config.port,
        "-U", config.user,
        "--no-password",
    ]


def dump_args(config: ConnectionConfig, file_path: Path) -> List[str]:
    """pg_dump in custom format, verbose, writing to file_path."""
    return [
        "-h", config.host,
        "-p", config.port,
        "-U", config.user,
        "-Fc",
        "--no-password",
        "-v",
        config.database,
        "-f", str(file_path),
    ]


def restore_args(config: ConnectionConfig, dump_file: Path, clean: bool) -> List[str]:
    """pg_restore into config.database, dropping existing objects when clean."""
    args = connection_args(config)
    if clean:
        args.append("--clean")
    args += ["-d", config.database, str(dump_file)]
    return args


def createdb_args(config: ConnectionConfig, maintenance_db: str) -> List[str]:
    """createdb from template0 with UTF8 encoding."""
    return connection_args(config) + [
        f"--maintenance-db={maintenance_db}",
        "--echo",
        "--template=template0",
        "--encoding=UTF8",
        config.database,
    ]


def psql_query_args(config: ConnectionConfig, maintenance_db: str, sql: str) -> List[str]:
    """psql printing bare, unaligned rows for a single command."""
    return connection_args(config) + [
        f"--dbname={maintenance_db}",
        "--tuples-only",
        "--no-align",
        "-c", sql,
    ]


def quote_literal(value: str) -> str:
    """Quote a value as an SQL string literal."""
    return "'" + value.replace("'", "''") + "'"
