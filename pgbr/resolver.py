# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Connection Resolver - Which database does a request target?

GET requests use the defaults loaded from the environment at startup.
POST requests carry their own connection as a single JSON object:

    {"host": "db.local", "port": "5432", "db": "app", "user": "app", "pass": "secret"}

port and pass are optional. Keys are matched case-insensitively.
"""

import json
from typing import AsyncIterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pgbr.config import DEFAULT_PG_PORT, ConnectionConfig
from pgbr.errors import (
    MESSAGE_BODY_BAD_JSON,
    MESSAGE_BODY_EMPTY,
    MESSAGE_BODY_NOT_OBJECT,
    MESSAGE_BODY_NOT_SINGLE,
    MESSAGE_BODY_TOO_LARGE,
    MESSAGE_ENV_NOT_SET,
    MESSAGE_METHOD_NOT_SUPPORTED,
    MESSAGE_NOT_SUFFICIENT_DATA,
    explain_bad_json_at,
    explain_invalid_field,
)
from pgbr.exceptions import (
    ConfigurationUnavailableError,
    InsufficientConfigurationError,
    MalformedInputError,
    UnsupportedOperationError,
)

MAX_BODY_BYTES = 1024 * 1024


class ConnectionPayload(BaseModel):
    """Wire form of a connection in a POST body."""

    model_config = ConfigDict(strict=True, extra="ignore")

    host: str = ""
    port: str = ""
    db: str = ""
    user: str = ""
    password: str = Field(default="", alias="pass")

    def to_config(self) -> ConnectionConfig:
        return ConnectionConfig(
            host=self.host,
            port=self.port or DEFAULT_PG_PORT,
            database=self.db,
            user=self.user,
            password=self.password,
        )


async def read_limited_body(stream: AsyncIterable[bytes], limit: int = MAX_BODY_BYTES) -> bytes:
    """
    Read a request body, refusing anything larger than limit bytes.

    Raises:
        MalformedInputError: 413 once the limit is exceeded
    """
    chunks = []
    size = 0
    async for chunk in stream:
        size += len(chunk)
        if size > limit:
            raise MalformedInputError(MESSAGE_BODY_TOO_LARGE, status_code=413)
        chunks.append(chunk)
    return b"".join(chunks)


JSON_LITERALS = ("true", "false", "null")


def _is_truncated(error: json.JSONDecodeError, text: str) -> bool:
    if error.pos >= len(text.rstrip()) or error.msg.startswith("Unterminated string"):
        return True
    # A literal or a sign cut off by the end of the body, e.g. {"host": tru
    rest = text[error.pos:].rstrip()
    return error.msg.startswith("Expecting value") and (
        rest == "-" or any(literal.startswith(rest) for literal in JSON_LITERALS)
    )


def decode_connection_body(raw: bytes) -> ConnectionConfig:
    """
    Decode exactly one JSON object into a ConnectionConfig.

    Raises:
        MalformedInputError: If the body is empty, not JSON, has a field of
            the wrong type, or holds more than one JSON value
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedInputError(explain_bad_json_at(exc.start)) from exc

    if not text.strip():
        raise MalformedInputError(MESSAGE_BODY_EMPTY)

    decoder = json.JSONDecoder()
    start = len(text) - len(text.lstrip())
    try:
        value, end = decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if _is_truncated(exc, text):
            raise MalformedInputError(MESSAGE_BODY_BAD_JSON) from exc
        raise MalformedInputError(explain_bad_json_at(exc.pos)) from exc

    if text[end:].strip():
        raise MalformedInputError(MESSAGE_BODY_NOT_SINGLE)

    if not isinstance(value, dict):
        raise MalformedInputError(MESSAGE_BODY_NOT_OBJECT)

    fields = {str(key).lower(): item for key, item in value.items()}
    try:
        payload = ConnectionPayload.model_validate(fields)
    except ValidationError as exc:
        loc = exc.errors()[0]["loc"]
        raise MalformedInputError(explain_invalid_field(str(loc[0]) if loc else "")) from exc

    return payload.to_config()


async def resolve_connection(
    method: str,
    body: AsyncIterable[bytes] | None,
    env_defaults: ConnectionConfig | None,
) -> ConnectionConfig:
    """
    Resolve the connection a request targets.

    Args:
        method: HTTP method of the request
        body: Request body stream, only read for POST
        env_defaults: Connection loaded from the environment, if any

    Returns:
        A complete ConnectionConfig

    Raises:
        ConfigurationUnavailableError: GET without environment defaults
        MalformedInputError: POST body that is not a single JSON object
        InsufficientConfigurationError: POST body without host, db or user
        UnsupportedOperationError: Any other method
    """
    method = method.upper()

    if method == "GET":
        if env_defaults is None:
            raise ConfigurationUnavailableError(MESSAGE_ENV_NOT_SET)
        return env_defaults

    if method == "POST":
        raw = await read_limited_body(body) if body is not None else b""
        config = decode_connection_body(raw)
        if not config.is_complete():
            raise InsufficientConfigurationError(MESSAGE_NOT_SUFFICIENT_DATA)
        return config

    raise UnsupportedOperationError(MESSAGE_METHOD_NOT_SUPPORTED)
