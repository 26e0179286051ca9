# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Environment-based configuration.

The environment is read exactly once, before the server starts, and
turned into an immutable ServiceSettings instance.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from pgbr.config import (
    DEFAULT_BACKUPS_ROOT,
    DEFAULT_COMMAND_TIMEOUT,
    DEFAULT_PG_PORT,
    ConnectionConfig,
    ServiceSettings,
    ToolPaths,
)
from pgbr.errors import (
    explain_invalid_listen_port_env,
    explain_invalid_log_format_env,
    explain_invalid_log_level_env,
    explain_invalid_port_env,
    explain_invalid_timeout_env,
)
from pgbr.exceptions import ConfigurationError


def _get(environ: Mapping[str, str], name: str, default: str = "") -> str:
    # Empty values count as unset
    value = environ.get(name)
    if not value:
        return default
    return value


def _parse_port(value: str, explain) -> int:
    try:
        port = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain(value)) from exc
    if not 1 <= port <= 65535:
        raise ConfigurationError(explain(value))
    return port


def _parse_timeout(value: str | None) -> float | None:
    if not value:
        return DEFAULT_COMMAND_TIMEOUT
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(explain_invalid_timeout_env(value)) from exc
    if seconds < 0:
        raise ConfigurationError(explain_invalid_timeout_env(value))
    return seconds or None


LOG_FORMATS = ("console", "json")


def _parse_log_level(value: str) -> str:
    level = value.upper()
    if level not in logging.getLevelNamesMapping():
        raise ConfigurationError(explain_invalid_log_level_env(value))
    return level


def _parse_log_format(value: str) -> str:
    fmt = value.lower()
    if fmt not in LOG_FORMATS:
        raise ConfigurationError(explain_invalid_log_format_env(value))
    return fmt


def _parse_flag(value: str | None) -> bool:
    return (value or "").upper() == "TRUE"


def load_env_defaults(environ: Mapping[str, str] | None = None) -> ConnectionConfig | None:
    """
    Build the default connection from PG_* variables.

    Returns None when PG_HOST, PG_DB or PG_USER is missing, in which case
    GET triggers answer 501.
    """

    environ = os.environ if environ is None else environ

    port = _get(environ, "PG_PORT", DEFAULT_PG_PORT)
    _parse_port(port, explain_invalid_port_env)

    config = ConnectionConfig(
        host=_get(environ, "PG_HOST"),
        port=port,
        database=_get(environ, "PG_DB"),
        user=_get(environ, "PG_USER"),
        password=_get(environ, "PG_PASS"),
    )
    return config if config.is_complete() else None


def load_settings_from_env(environ: Mapping[str, str] | None = None) -> ServiceSettings:
    """
    Create ServiceSettings from environment variables.

    Environment variables:
        - PG_HOST, PG_PORT (default 5432), PG_DB, PG_USER, PG_PASS:
          default connection for GET triggers
        - USE_DIR_STRUCTURE: "TRUE" nests dumps under <host>/<db>/
        - PGBR_BACKUPS_ROOT: backups directory (default: /backups)
        - PGBR_COMMAND_TIMEOUT: seconds before a tool is killed
          (default: 3600, 0 disables)
        - PGBR_MAINTENANCE_DB: database used for existence checks and
          createdb (default: postgres)
        - PGBR_PSQL, PGBR_PG_DUMP, PGBR_PG_RESTORE, PGBR_CREATEDB:
          executable overrides
        - PGBR_LISTEN_HOST, PGBR_LISTEN_PORT: bind address (default 0.0.0.0:80)
        - PGBR_LOG_LEVEL, PGBR_LOG_FORMAT: log level (default INFO) and
          renderer, console or json (default console)

    Raises:
        ConfigurationError: If a value cannot be parsed
    """

    environ = os.environ if environ is None else environ

    tools = ToolPaths(
        psql=_get(environ, "PGBR_PSQL", "psql"),
        pg_dump=_get(environ, "PGBR_PG_DUMP", "pg_dump"),
        pg_restore=_get(environ, "PGBR_PG_RESTORE", "pg_restore"),
        createdb=_get(environ, "PGBR_CREATEDB", "createdb"),
    )

    return ServiceSettings(
        env_defaults=load_env_defaults(environ),
        use_dir_structure=_parse_flag(environ.get("USE_DIR_STRUCTURE")),
        backups_root=Path(_get(environ, "PGBR_BACKUPS_ROOT", str(DEFAULT_BACKUPS_ROOT))),
        command_timeout=_parse_timeout(environ.get("PGBR_COMMAND_TIMEOUT")),
        maintenance_db=_get(environ, "PGBR_MAINTENANCE_DB", "postgres"),
        tools=tools,
        listen_host=_get(environ, "PGBR_LISTEN_HOST", "0.0.0.0"),
        listen_port=_parse_port(
            _get(environ, "PGBR_LISTEN_PORT", "80"), explain_invalid_listen_port_env
        ),
        log_level=_parse_log_level(_get(environ, "PGBR_LOG_LEVEL", "INFO")),
        log_format=_parse_log_format(_get(environ, "PGBR_LOG_FORMAT", "console")),
    )
