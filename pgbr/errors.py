# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Human-friendly error message helpers for PGBR.

These helpers centralize wording for configuration and request errors so
that all modules present consistent, actionable messages. The request-time
constants are part of the HTTP contract and must not change.
"""

MESSAGE_ENV_NOT_SET = "Environment variables not set"
MESSAGE_METHOD_NOT_SUPPORTED = "Unsupported HTTP method"
MESSAGE_NOT_SUFFICIENT_DATA = "POST data doesn't have sufficient data"
MESSAGE_IO_ERROR = "Unknown IO error"
MESSAGE_BACKUP_FILE_NOT_FOUND = "Backup file not found"
MESSAGE_FILE_NAME_NOT_SET = "File name doesn't set by request URL"
MESSAGE_INTERNAL_ERROR = "Internal Server Error"

MESSAGE_BODY_EMPTY = "Request body must not be empty"
MESSAGE_BODY_TOO_LARGE = "Request body must not be larger than 1MB"
MESSAGE_BODY_NOT_SINGLE = "Request body must only contain a single JSON object"
MESSAGE_BODY_NOT_OBJECT = "Request body must be a JSON object"
MESSAGE_BODY_BAD_JSON = "Request body contains badly-formed JSON"


def explain_bad_json_at(position: int) -> str:
    """
    Explain a JSON syntax error at a known character offset.
    """

    return f"{MESSAGE_BODY_BAD_JSON} (at position {position})"


def explain_invalid_field(field_name: str) -> str:
    """
    Explain that a request body field has the wrong JSON type.
    """

    return f'Request body contains an invalid value for the "{field_name}" field'


def explain_invalid_port_env(value: str | None) -> str:
    """
    Explain that PG_PORT is invalid.
    """

    return (
        f"Invalid PG_PORT value: {value!r}. "
        "It must be a TCP port number between 1 and 65535."
    )


def explain_invalid_timeout_env(value: str | None) -> str:
    """
    Explain that PGBR_COMMAND_TIMEOUT is invalid.
    """

    return (
        f"Invalid PGBR_COMMAND_TIMEOUT value: {value!r}. "
        "It must be a non-negative number of seconds (0 disables the timeout)."
    )


def explain_invalid_listen_port_env(value: str | None) -> str:
    """
    Explain that PGBR_LISTEN_PORT is invalid.
    """

    return (
        f"Invalid PGBR_LISTEN_PORT value: {value!r}. "
        "It must be a TCP port number between 1 and 65535."
    )


def explain_missing_tools(tools: list[str]) -> str:
    """
    Explain that required PostgreSQL utilities could not be executed.
    """

    return (
        f"PostgreSQL utils not found: {', '.join(tools)}. "
        "Install the PostgreSQL client package or point PGBR_PSQL, PGBR_PG_DUMP, "
        "PGBR_PG_RESTORE and PGBR_CREATEDB at the executables."
    )


def explain_backup_path_outside_root(host: str, database: str) -> str:
    """
    Explain that a host or database name would place the dump outside the
    backups root.
    """

    return (
        f"Host {host!r} and database {database!r} cannot be used as a backup "
        "file name: the dump would be written outside the backups directory."
    )


def explain_invalid_log_level_env(value: str | None) -> str:
    """
    Explain that PGBR_LOG_LEVEL is invalid.
    """

    return (
        f"Invalid PGBR_LOG_LEVEL value: {value!r}. "
        "Use one of DEBUG, INFO, WARNING, ERROR or CRITICAL."
    )


def explain_invalid_log_format_env(value: str | None) -> str:
    """
    Explain that PGBR_LOG_FORMAT is invalid.
    """

    return f"Invalid PGBR_LOG_FORMAT value: {value!r}. Use 'console' or 'json'."
