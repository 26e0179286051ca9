# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR FastAPI Integration - HTTP surface of the service.

Endpoints:
- /status   always ok
- /backup   GET uses the environment connection, POST a JSON body
- /restore  same connection rule, dump named by the ?file= parameter

Every method is routed to the handlers so that unsupported methods get the
normal JSON error body rather than the framework's default 405.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request

from pgbr import __version__
from pgbr.backup.manager import ACTION_BACKUP, run_backup
from pgbr.backup.restore import ACTION_RESTORE, locate_backup_artifact, run_restore
from pgbr.config import ServiceSettings
from pgbr.env import load_settings_from_env
from pgbr.errors import MESSAGE_FILE_NAME_NOT_SET, explain_missing_tools
from pgbr.exceptions import BackupFileNotFoundError, ToolsUnavailableError
from pgbr.process import CommandInvoker, invoke, verify_required_tools
from pgbr.resolver import resolve_connection
from pgbr.responses import ActionJSONResponse, ActionResponse, ok_response, render, respond

logger = structlog.get_logger()

ACTION_STATUS = "status"
ROUTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def register_routes(
    app: FastAPI,
    settings: ServiceSettings,
    invoker: CommandInvoker = invoke,
) -> None:
    """
    Register the status, backup and restore endpoints on a FastAPI app.

    Args:
        app: FastAPI application
        settings: Process-wide service settings
        invoker: Command invoker used by every action
    """

    @app.api_route("/status", methods=ROUTED_METHODS)
    async def status(request: Request) -> ActionJSONResponse:
        logger.info("request_received", method=request.method, handler=ACTION_STATUS)
        return render(ok_response(ACTION_STATUS))

    @app.api_route("/backup", methods=ROUTED_METHODS)
    async def backup(request: Request) -> ActionJSONResponse:
        logger.info("request_received", method=request.method, handler=ACTION_BACKUP)

        async def operation() -> ActionResponse:
            config = await resolve_connection(
                request.method, request.stream(), settings.env_defaults
            )
            return await run_backup(config, settings, invoker)

        return await respond(ACTION_BACKUP, operation())

    @app.api_route("/restore", methods=ROUTED_METHODS)
    async def restore(request: Request, file: str = "") -> ActionJSONResponse:
        logger.info(
            "request_received", method=request.method, handler=ACTION_RESTORE, file=file
        )

        async def operation() -> ActionResponse:
            if not file:
                raise BackupFileNotFoundError(MESSAGE_FILE_NAME_NOT_SET)

            # The dump is checked before the connection so a bad name never
            # reaches the server, whatever the method.
            artifact = await locate_backup_artifact(file, settings.backups_root)
            config = await resolve_connection(
                request.method, request.stream(), settings.env_defaults
            )
            return await run_restore(config, artifact, settings, invoker)

        return await respond(ACTION_RESTORE, operation())


def create_app(
    settings: ServiceSettings | None = None,
    invoker: CommandInvoker | None = None,
    verify_tools: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Settings are loaded from the environment when not given. With
    verify_tools, startup aborts with ToolsUnavailableError if any
    PostgreSQL utility cannot be executed.

    Run with:
        uvicorn --factory pgbr.integrations.fastapi:create_app

    Args:
        settings: Service settings (default: load_settings_from_env())
        invoker: Command invoker (default: real subprocesses)
        verify_tools: Check the PostgreSQL utilities on startup
    """
    if settings is None:
        settings = load_settings_from_env()
    if invoker is None:
        invoker = invoke

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "pgbr_starting",
            env_defaults_set=settings.env_defaults is not None,
            use_dir_structure=settings.use_dir_structure,
            backups_root=str(settings.backups_root),
        )

        if verify_tools:
            missing = await verify_required_tools(settings.tools, invoker)
            if missing:
                logger.critical("postgresql_utils_not_found", tools=missing)
                raise ToolsUnavailableError(
                    explain_missing_tools(missing), details={"tools": missing}
                )

        logger.info("pgbr_started")
        yield
        logger.info("pgbr_stopped")

    app = FastAPI(
        title="PG Backup Restore",
        description="Trigger PostgreSQL backup and restore over HTTP",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.pgbr_settings = settings

    register_routes(app, settings, invoker)

    return app
