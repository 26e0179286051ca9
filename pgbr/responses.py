# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Responses - The single wire shape of every endpoint.

Orchestrators return an ActionResponse on success and raise a PGBRError
on failure; respond() turns either into an HTTP status and JSON body.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Dict

import structlog
from fastapi.responses import JSONResponse

from pgbr.config import ActionStatus
from pgbr.errors import MESSAGE_INTERNAL_ERROR
from pgbr.exceptions import PGBRError

logger = structlog.get_logger()

CONTENT_TYPE = "application/json; charset=UTF-8"

_DEFAULT_STATUS_CODES = {
    ActionStatus.OK: 200,
    ActionStatus.SKIPPED: 200,
    ActionStatus.ERROR: 500,
}


@dataclass(frozen=True)
class ActionResponse:
    """Result of one action; empty message and file are omitted on the wire."""

    status: ActionStatus
    action: str
    message: str = ""
    file: str = ""

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": self.status.value, "action": self.action}
        if self.message:
            body["message"] = self.message
        if self.file:
            body["file"] = self.file
        return body


class ActionJSONResponse(JSONResponse):
    media_type = CONTENT_TYPE


def ok_response(action: str, file: str = "") -> ActionResponse:
    return ActionResponse(status=ActionStatus.OK, action=action, file=file)


def skipped_response(action: str, message: str = "") -> ActionResponse:
    return ActionResponse(status=ActionStatus.SKIPPED, action=action, message=message)


def error_response(action: str, message: str) -> ActionResponse:
    return ActionResponse(status=ActionStatus.ERROR, action=action, message=message)


def render(response: ActionResponse, status_code: int | None = None) -> ActionJSONResponse:
    """Serialize an ActionResponse with its HTTP status code."""
    if status_code is None:
        status_code = _DEFAULT_STATUS_CODES[response.status]
    return ActionJSONResponse(content=response.to_dict(), status_code=status_code)


def render_error(action: str, error: PGBRError) -> ActionJSONResponse:
    logger.warning(
        "action_failed",
        action=action,
        error_kind=type(error).__name__,
        status_code=error.status_code,
        error=error.message,
    )
    return render(error_response(action, error.message), error.status_code)


async def respond(action: str, operation: Awaitable[ActionResponse]) -> ActionJSONResponse:
    """
    Await an orchestration and normalize its outcome.

    Nothing escapes: PGBR errors keep their status code and message,
    anything else becomes a generic 500.
    """
    try:
        result = await operation
    except PGBRError as e:
        return render_error(action, e)
    except Exception:
        logger.exception("action_crashed", action=action)
        return render(error_response(action, MESSAGE_INTERNAL_ERROR), 500)

    return render(result)
