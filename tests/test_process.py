# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Process Invoker Tests.

These run real child processes, using the current Python interpreter as
a stand-in for the PostgreSQL utilities.
"""

import asyncio
import os
import sys
import time
from pathlib import Path

import pytest

from pgbr.config import ToolPaths
from pgbr.exceptions import CommandTimeoutError, SubprocessError
from pgbr.process import (
    PASSWORD_ENV_VAR,
    ActionResult,
    format_output,
    invoke,
    raise_for_result,
    verify_required_tools,
)

PYTHON = sys.executable


@pytest.mark.asyncio
async def test_successful_output_suppressed_by_default():
    result = await invoke(PYTHON, ["-c", "print('dumped')"])

    assert result == ActionResult(succeeded=True, output="")


@pytest.mark.asyncio
async def test_successful_output_returned_when_not_suppressed():
    result = await invoke(PYTHON, ["-c", "print('1')"], suppress_success_output=False)

    assert result.succeeded
    assert result.output.strip() == "1"


@pytest.mark.asyncio
async def test_stdout_and_stderr_are_combined():
    script = "import sys; print('out'); sys.stdout.flush(); sys.stderr.write('err\\n')"

    result = await invoke(PYTHON, ["-c", script], suppress_success_output=False)

    assert "out" in result.output
    assert "err" in result.output


@pytest.mark.asyncio
async def test_nonzero_exit_returns_diagnostic():
    script = "import sys; sys.stderr.write('FATAL: role does not exist'); sys.exit(3)"

    result = await invoke(PYTHON, ["-c", script])

    assert not result.succeeded
    assert not result.timed_out
    assert result.output.startswith(f"Can't execute app {PYTHON}, error: exit status 3\nOutput:\n")
    assert "FATAL: role does not exist" in result.output


@pytest.mark.asyncio
async def test_spawn_failure_returns_diagnostic():
    result = await invoke("pgbr-no-such-tool", ["--help"])

    assert not result.succeeded
    assert result.output.startswith("Can't execute app pgbr-no-such-tool, error: ")


@pytest.mark.asyncio
async def test_secret_is_passed_through_environment(monkeypatch):
    """
    CRITICAL: The password reaches the child through PGPASSWORD only.
    """
    monkeypatch.delenv(PASSWORD_ENV_VAR, raising=False)
    script = f"import os; print(os.environ.get('{PASSWORD_ENV_VAR}', '<unset>'))"

    with_secret = await invoke(
        PYTHON, ["-c", script], secret="s3cret", suppress_success_output=False
    )
    without_secret = await invoke(PYTHON, ["-c", script], suppress_success_output=False)

    assert with_secret.output.strip() == "s3cret"
    assert without_secret.output.strip() == "<unset>"


@pytest.mark.asyncio
async def test_environment_is_inherited_with_secret(monkeypatch):
    monkeypatch.setenv("PGBR_TEST_MARKER", "inherited")
    script = "import os; print(os.environ['PGBR_TEST_MARKER'])"

    result = await invoke(PYTHON, ["-c", script], secret="s3cret", suppress_success_output=False)

    assert result.output.strip() == "inherited"


@pytest.mark.asyncio
async def test_hung_command_is_killed_after_timeout():
    start = time.monotonic()

    result = await invoke(PYTHON, ["-c", "import time; time.sleep(30)"], timeout=0.5)

    assert time.monotonic() - start < 10
    assert not result.succeeded
    assert result.timed_out
    assert "timed out after 0.5 seconds" in result.output


@pytest.mark.asyncio
async def test_cancelled_invocation_kills_the_child(temp_dir: Path):
    pid_file = temp_dir / "child.pid"
    script = (
        "import os, pathlib, time; "
        f"pathlib.Path({str(pid_file)!r}).write_text(str(os.getpid())); "
        "time.sleep(30)"
    )

    task = asyncio.create_task(invoke(PYTHON, ["-c", script], timeout=None))
    for _ in range(200):
        if pid_file.exists() and pid_file.read_text():
            break
        await asyncio.sleep(0.05)
    pid = int(pid_file.read_text())

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)


def test_raise_for_result():
    raise_for_result(ActionResult(succeeded=True, output=""))

    with pytest.raises(SubprocessError) as exc_info:
        raise_for_result(ActionResult(succeeded=False, output="diag"), "restoreDb execution error")
    assert exc_info.value.message == "restoreDb execution error\ndiag"
    assert not isinstance(exc_info.value, CommandTimeoutError)

    with pytest.raises(CommandTimeoutError):
        raise_for_result(ActionResult(succeeded=False, output="diag", timed_out=True))


def test_format_output_indents_every_line():
    assert format_output("a\nb\n") == "\n       --> a\n       --> b"


@pytest.mark.asyncio
async def test_verify_required_tools_reports_missing():
    tools = ToolPaths(
        psql=PYTHON,
        pg_dump=PYTHON,
        pg_restore="pgbr-no-such-restore",
        createdb=PYTHON,
    )

    assert await verify_required_tools(tools) == ["pgbr-no-such-restore"]


@pytest.mark.asyncio
async def test_verify_required_tools_all_present():
    tools = ToolPaths(psql=PYTHON, pg_dump=PYTHON, pg_restore=PYTHON, createdb=PYTHON)

    assert await verify_required_tools(tools) == []
