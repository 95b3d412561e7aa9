# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Subprocess-backed executor implementation for tinysh.

run() starts a resolved executable with an argument vector and captures
stdout and stderr interleaved into one byte stream. The kernel normalizes
the captured bytes before printing them.

Child failures are never raised. A child that cannot be started reports
exit code 127 with empty output, a timed out child reports 124 with the
output captured before it was killed.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass

EXIT_NOT_STARTED = 127
EXIT_TIMED_OUT = 124


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    output: bytes


class SubprocessExecutor:
    """Subprocess implementation of Executor protocol."""

    def __init__(self, timeout: float | None = None):
        """Initialize executor with configuration.

        Args:
            timeout: Seconds to wait for a child before killing it.
                None (the default) waits indefinitely.
        """
        self.timeout = timeout

    def run(
        self, full_path: str, args: list[str] | None = None,
        cwd: str | None = None
    ) -> ProcessResult:
        """Run an executable and capture its combined output.

        Args:
            full_path: Resolved executable path (becomes argv[0])
            args: Arguments passed after argv[0]
            cwd: Working directory for the child (default: current directory)

        Returns:
            ProcessResult
        """
        argv = [full_path]
        if args:
            argv.extend(args)

        try:
            result = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
                cwd=cwd,
            )
            return ProcessResult(
                exit_code=result.returncode,
                output=result.stdout or b"",
            )
        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                exit_code=EXIT_TIMED_OUT,
                output=e.output or b"",
            )
        except (OSError, ValueError):
            return ProcessResult(exit_code=EXIT_NOT_STARTED, output=b"")
