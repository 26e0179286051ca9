# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Test fixtures for PGBR tests.

Provides temporary backup roots, settings and a recording stub invoker
that stands in for the PostgreSQL utilities.
"""

import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Generator, List, Sequence, Union

import pytest

from pgbr.config import ConnectionConfig, ServiceSettings, ToolPaths
from pgbr.process import ActionResult


@dataclass
class InvokerCall:
    """One recorded command."""

    executable: str
    args: List[str]
    secret: str | None
    log_output: bool
    suppress_success_output: bool
    timeout: float | None


StubResult = Union[ActionResult, Callable[[InvokerCall], ActionResult]]


class RecordingInvoker:
    """
    CommandInvoker stub that records every call.

    Results are looked up by executable; unknown executables succeed
    with empty output.
    """

    def __init__(self, results: Dict[str, StubResult] | None = None):
        self.results: Dict[str, StubResult] = dict(results or {})
        self.calls: List[InvokerCall] = []

    async def __call__(
        self,
        executable: str,
        args: Sequence[str],
        secret: str | None = None,
        log_output: bool = True,
        suppress_success_output: bool = True,
        timeout: float | None = None,
    ) -> ActionResult:
        call = InvokerCall(
            executable, list(args), secret, log_output, suppress_success_output, timeout
        )
        self.calls.append(call)
        result = self.results.get(executable, ActionResult(succeeded=True, output=""))
        if callable(result):
            result = result(call)
        return result

    @property
    def executables(self) -> List[str]:
        return [call.executable for call in self.calls]

    def call_for(self, executable: str) -> InvokerCall:
        matches = [call for call in self.calls if call.executable == executable]
        assert len(matches) == 1, f"expected one {executable} call, got {self.executables}"
        return matches[0]


def failed(output: str = "boom", timed_out: bool = False) -> ActionResult:
    """ActionResult of a failed command with a diagnostic like invoke() builds."""
    return ActionResult(
        succeeded=False,
        output=f"Can't execute app tool, error: exit status 1\nOutput:\n{output}",
        timed_out=timed_out,
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def backups_root(temp_dir: Path) -> Path:
    """Create an empty backups root."""
    root = temp_dir / "backups"
    root.mkdir()
    return root


@pytest.fixture
def test_settings(backups_root: Path) -> ServiceSettings:
    """Settings without environment defaults, flat layout, no timeout."""
    return ServiceSettings(
        env_defaults=None,
        use_dir_structure=False,
        backups_root=backups_root,
        command_timeout=None,
        tools=ToolPaths(),
    )


@pytest.fixture
def connection() -> ConnectionConfig:
    """A complete connection with a password."""
    return ConnectionConfig(
        host="db.local",
        port="5433",
        database="appdb",
        user="app",
        password="s3cret-pass",
    )


@pytest.fixture
def invoker() -> RecordingInvoker:
    """Stub invoker where every tool succeeds and psql answers empty."""
    return RecordingInvoker()
