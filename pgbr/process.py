# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
PGBR Process Invoker - The single chokepoint for external commands.

Every PostgreSQL utility runs through invoke(). A password is handed to
the child through PGPASSWORD in its environment and never through its
argument list, which other users can read from the process table.
"""

import asyncio
import contextlib
import os
from dataclasses import dataclass
from typing import List, Protocol, Sequence

import structlog

from pgbr.config import ToolPaths
from pgbr.exceptions import CommandTimeoutError, SubprocessError

logger = structlog.get_logger()

PASSWORD_ENV_VAR = "PGPASSWORD"

# Continuation prefix for multi-line tool output in the log
OUTPUT_OFFSET = "\n       --> "


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one external command."""

    succeeded: bool
    output: str
    timed_out: bool = False


class CommandInvoker(Protocol):
    """Protocol for running external commands (real or stubbed)."""

    async def __call__(
        self,
        executable: str,
        args: Sequence[str],
        secret: str | None = None,
        log_output: bool = True,
        suppress_success_output: bool = True,
        timeout: float | None = None,
    ) -> ActionResult:
        ...


def format_output(output: str) -> str:
    """Indent every line of tool output for human-readable log entries."""
    return OUTPUT_OFFSET + output.strip().replace("\n", OUTPUT_OFFSET)


def _failure(executable: str, error: str, output: str, timed_out: bool = False) -> ActionResult:
    message = f"Can't execute app {executable}, error: {error}\nOutput:\n{output}"
    logger.error("external_app_failed", app=executable, diagnostic=message)
    return ActionResult(succeeded=False, output=message, timed_out=timed_out)


async def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await asyncio.shield(proc.wait())


async def invoke(
    executable: str,
    args: Sequence[str],
    secret: str | None = None,
    log_output: bool = True,
    suppress_success_output: bool = True,
    timeout: float | None = None,
) -> ActionResult:
    """
    Run an external command and classify its outcome.

    stdout and stderr are captured as one combined stream.

    Args:
        executable: Program to run (looked up on PATH)
        args: Arguments, never containing the secret
        secret: Password exported to the child as PGPASSWORD when non-empty
        log_output: Log the captured output of a successful run
        suppress_success_output: Return empty output on success
        timeout: Seconds before the child is killed, None for no limit

    Returns:
        ActionResult; on failure the output holds a diagnostic naming the
        executable, the error and the captured output
    """
    env = None
    if secret:
        env = {**os.environ, PASSWORD_ENV_VAR: secret}

    logger.debug("external_app_starting", app=executable, args=list(args))

    try:
        proc = await asyncio.create_subprocess_exec(
            executable,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env=env,
        )
    except OSError as e:
        return _failure(executable, str(e), "")

    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(proc)
        return _failure(
            executable, f"timed out after {timeout:g} seconds", "", timed_out=True
        )
    except BaseException:
        # Cancelled request: the child must not outlive it
        await _kill(proc)
        raise

    output = stdout.decode("utf-8", errors="replace") if stdout else ""

    if proc.returncode != 0:
        return _failure(executable, f"exit status {proc.returncode}", output)

    if log_output:
        logger.info("external_app_output", app=executable, output=format_output(output))

    if suppress_success_output:
        return ActionResult(succeeded=True, output="")

    return ActionResult(succeeded=True, output=output)


def raise_for_result(result: ActionResult, context: str = "") -> None:
    """
    Raise the matching error for a failed ActionResult.

    Raises:
        CommandTimeoutError: If the command was killed by the timeout
        SubprocessError: If the command failed otherwise
    """
    if result.succeeded:
        return
    message = f"{context}\n{result.output}" if context else result.output
    if result.timed_out:
        raise CommandTimeoutError(message)
    raise SubprocessError(message)


async def verify_required_tools(
    tools: ToolPaths,
    invoker: CommandInvoker = invoke,
    timeout: float | None = 30.0,
) -> List[str]:
    """
    Check that every PostgreSQL utility can be executed.

    Each tool is run with --help.

    Returns:
        The tools that failed, empty when all are available
    """
    missing: List[str] = []
    for tool in tools.all():
        result = await invoker(
            tool, ["--help"], log_output=False, suppress_success_output=True, timeout=timeout
        )
        if not result.succeeded:
            missing.append(tool)
    return missing
