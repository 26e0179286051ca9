# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Exceptions - Custom exceptions for the pgbr package.

Every request-time exception carries the HTTP status code it is
normalized to at the route boundary.
"""


class PGBRError(Exception):
    """Base exception for all PGBR errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(PGBRError):
    """Raised when startup configuration is invalid."""

    pass


class ToolsUnavailableError(PGBRError):
    """Raised at startup when required PostgreSQL utilities are missing."""

    pass


class ConfigurationUnavailableError(PGBRError):
    """Raised when environment defaults are requested but were never loaded."""

    status_code = 501


class MalformedInputError(PGBRError):
    """
    Raised when request input is malformed: a body that is not a single
    well-formed JSON object, or names that would leave the backups root.
    """

    status_code = 400

    def __init__(self, message: str, status_code: int = 400, details: dict | None = None):
        super().__init__(message, details)
        self.status_code = status_code


class InsufficientConfigurationError(PGBRError):
    """Raised when host, database or user are missing from a request."""

    status_code = 400


class UnsupportedOperationError(PGBRError):
    """Raised for HTTP methods that do not trigger an action."""

    status_code = 405


class BackupFileNotFoundError(PGBRError):
    """Raised when a restore names a dump that does not exist under the root."""

    status_code = 400


class StorageError(PGBRError):
    """Raised when backup directory or file I/O fails."""

    pass


class SubprocessError(PGBRError):
    """Raised when an external tool exits non-zero or cannot be spawned."""

    pass


class CommandTimeoutError(SubprocessError):
    """Raised when an external tool exceeds the configured timeout."""

    pass
