# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Connection Resolver Tests.

Covers environment defaults for GET, JSON body decoding for POST and the
error raised for every malformed body.
"""

import json
from typing import AsyncIterator

import pytest

from pgbr.config import ConnectionConfig
from pgbr.exceptions import (
    ConfigurationUnavailableError,
    InsufficientConfigurationError,
    MalformedInputError,
    UnsupportedOperationError,
)
from pgbr.resolver import MAX_BODY_BYTES, decode_connection_body, resolve_connection


async def body_stream(data: bytes, chunk_size: int = 64 * 1024) -> AsyncIterator[bytes]:
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


async def resolve_post(data: bytes) -> ConnectionConfig:
    return await resolve_connection("POST", body_stream(data), None)


# ============================================================================
# GET: environment defaults
# ============================================================================

@pytest.mark.asyncio
async def test_get_returns_environment_defaults(connection: ConnectionConfig):
    assert await resolve_connection("GET", None, connection) is connection


@pytest.mark.asyncio
async def test_get_without_defaults_is_unavailable():
    with pytest.raises(ConfigurationUnavailableError) as exc_info:
        await resolve_connection("GET", None, None)

    assert exc_info.value.status_code == 501
    assert exc_info.value.message == "Environment variables not set"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["PUT", "DELETE", "PATCH"])
async def test_other_methods_are_unsupported(method: str, connection):
    with pytest.raises(UnsupportedOperationError) as exc_info:
        await resolve_connection(method, body_stream(b"{}"), connection)

    assert exc_info.value.status_code == 405
    assert exc_info.value.message == "Unsupported HTTP method"


# ============================================================================
# POST: body decoding
# ============================================================================

@pytest.mark.asyncio
async def test_post_decodes_all_fields():
    body = {"host": "h", "port": "6543", "db": "d", "user": "u", "pass": "p"}

    config = await resolve_post(json.dumps(body).encode())

    assert config == ConnectionConfig(host="h", port="6543", database="d", user="u", password="p")


@pytest.mark.asyncio
async def test_post_port_and_password_are_optional():
    config = await resolve_post(b'{"host": "h", "db": "d", "user": "u"}')

    assert config.port == "5432"
    assert config.password == ""


@pytest.mark.asyncio
async def test_post_keys_are_case_insensitive_and_extras_ignored():
    config = await resolve_post(b'{"Host": "h", "DB": "d", "User": "u", "comment": 1}')

    assert (config.host, config.database, config.user) == ("h", "d", "u")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {},
        {"db": "d", "user": "u"},
        {"host": "h", "user": "u"},
        {"host": "h", "db": "d"},
        {"host": "", "db": "d", "user": "u"},
    ],
)
async def test_post_without_required_fields_is_insufficient(body: dict):
    with pytest.raises(InsufficientConfigurationError) as exc_info:
        await resolve_post(json.dumps(body).encode())

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "POST data doesn't have sufficient data"


@pytest.mark.parametrize(
    "raw,message",
    [
        (b"", "Request body must not be empty"),
        (b"  \n ", "Request body must not be empty"),
        (b'{"host": "h"', "Request body contains badly-formed JSON"),
        (b'{"host": "h', "Request body contains badly-formed JSON"),
        (b'{"host": tru', "Request body contains badly-formed JSON"),
        (b'{"host": nul  ', "Request body contains badly-formed JSON"),
        (b'{"port": -', "Request body contains badly-formed JSON"),
        (b'{"host": trux}', "Request body contains badly-formed JSON (at position 9)"),
        (b'{"host" "h"}', "Request body contains badly-formed JSON (at position 8)"),
        (b'{"host": 1}', 'Request body contains an invalid value for the "host" field'),
        (b'{"host": "h", "pass": 5}', 'Request body contains an invalid value for the "pass" field'),
        (b'{"host": "h", "port": 5432}', 'Request body contains an invalid value for the "port" field'),
        (b'{"host": "h"} {"db": "d"}', "Request body must only contain a single JSON object"),
        (b'{"host": "h"} trailing', "Request body must only contain a single JSON object"),
        (b'["h", "d", "u"]', "Request body must be a JSON object"),
    ],
)
def test_malformed_bodies(raw: bytes, message: str):
    with pytest.raises(MalformedInputError) as exc_info:
        decode_connection_body(raw)

    assert exc_info.value.message == message
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_oversize_body_is_rejected_with_413():
    raw = b'{"host": "' + b"h" * MAX_BODY_BYTES + b'", "db": "d", "user": "u"}'

    with pytest.raises(MalformedInputError) as exc_info:
        await resolve_post(raw)

    assert exc_info.value.status_code == 413
    assert exc_info.value.message == "Request body must not be larger than 1MB"


@pytest.mark.asyncio
async def test_body_at_limit_is_accepted():
    prefix = b'{"db": "d", "user": "u", "host": "'
    suffix = b'"}'
    raw = prefix + b"h" * (MAX_BODY_BYTES - len(prefix) - len(suffix)) + suffix

    config = await resolve_post(raw)

    assert len(raw) == MAX_BODY_BYTES
    assert config.database == "d"
