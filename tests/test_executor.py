"""
Tests for Subprocess implementation of Executor Protocol.
Covers command execution in isolation from Kernel.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from tinysh.executor import (
    EXIT_NOT_STARTED,
    EXIT_TIMED_OUT,
    ProcessResult,
    SubprocessExecutor,
)
from tinysh.utils import normalize_output


def _script(tmp_path: Path, name: str, body: str) -> str:
    path = tmp_path / name
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(0o755)
    return str(path)


@pytest.fixture
def executor() -> SubprocessExecutor:
    """Create executor with default settings."""
    return SubprocessExecutor()


# ----------------------------------------------------------------
# Basic execution
# ----------------------------------------------------------------


def test_executor_runs_program_with_args(tmp_path: Path, executor):
    """Arguments are forwarded after argv[0], unchanged."""
    prog = _script(tmp_path, "args", 'for a in "$@"; do echo "[$a]"; done\n')

    result = executor.run(prog, ["one", "two words", "3"])

    assert isinstance(result, ProcessResult)
    assert result.exit_code == 0
    assert result.output == b"[one]\n[two words]\n[3]\n"


def test_executor_passes_program_path_as_argv0(tmp_path: Path, executor):
    prog = _script(tmp_path, "argv0", 'echo "$0"\n')

    result = executor.run(prog, [])

    assert result.output.decode().strip() == prog


def test_executor_combines_stdout_and_stderr_in_order(tmp_path: Path, executor):
    prog = _script(
        tmp_path, "both", "echo out1\necho err1 1>&2\necho out2\n"
    )

    result = executor.run(prog)

    assert result.output == b"out1\nerr1\nout2\n"


def test_executor_returns_non_zero_exit_code(tmp_path: Path, executor):
    """Non-zero exit is reported, never raised."""
    prog = _script(tmp_path, "fail", "echo partial\nexit 42\n")

    result = executor.run(prog)

    assert result.exit_code == 42
    assert result.output == b"partial\n"


def test_executor_uses_cwd(tmp_path: Path, executor):
    prog = _script(tmp_path, "where", "pwd\n")
    work = tmp_path / "work"
    work.mkdir()

    result = executor.run(prog, cwd=str(work))

    assert result.output.decode().strip() == str(work)


def test_executor_child_stdin_is_empty(tmp_path: Path, executor):
    prog = _script(tmp_path, "reader", "cat\necho done\n")

    result = executor.run(prog)

    assert result.output == b"done\n"


# ----------------------------------------------------------------
# Failure handling
# ----------------------------------------------------------------


def test_executor_handles_spawn_failure(tmp_path: Path, executor):
    """A program that cannot start gives 127 and no output."""
    result = executor.run(str(tmp_path / "does-not-exist"), ["x"])

    assert result.exit_code == EXIT_NOT_STARTED
    assert result.output == b""


def test_executor_handles_exec_format_error(tmp_path: Path, executor):
    bad = tmp_path / "garbage"
    bad.write_bytes(b"\x00\x01\x02 not a program")
    bad.chmod(0o755)

    result = executor.run(str(bad))

    assert result.exit_code == EXIT_NOT_STARTED
    assert result.output == b""


def test_executor_handles_timeout(tmp_path: Path):
    """Executor must catch TimeoutExpired and report it."""
    prog = _script(tmp_path, "slow", "echo started\nexec sleep 10\n")
    executor = SubprocessExecutor(timeout=1)

    result = executor.run(prog)

    assert result.exit_code == EXIT_TIMED_OUT


def test_executor_handles_os_error_from_subprocess(
    monkeypatch: pytest.MonkeyPatch, executor
):
    def fake_run(*args, **kwargs):
        raise PermissionError("denied")

    monkeypatch.setattr(subprocess, "run", fake_run)

    result = executor.run("/bin/true")

    assert result.exit_code == EXIT_NOT_STARTED
    assert result.output == b""


def test_executor_default_timeout_is_none():
    assert SubprocessExecutor().timeout is None


# ----------------------------------------------------------------
# Printed output (run + normalize_output)
# ----------------------------------------------------------------


def test_run_output_normalizes(tmp_path: Path, executor):
    prog = _script(tmp_path, "messy", "printf '\\n\\nfirst\\n second'\n")

    assert normalize_output(executor.run(prog).output) == "first\nsecond\n"


def test_run_empty_output_normalizes_to_single_newline(tmp_path: Path, executor):
    prog = _script(tmp_path, "quiet", "exit 0\n")

    assert normalize_output(executor.run(prog).output) == "\n"


def test_spawn_failure_normalizes_to_single_newline(tmp_path: Path, executor):
    result = executor.run(str(tmp_path / "missing"))

    assert normalize_output(result.output) == "\n"
