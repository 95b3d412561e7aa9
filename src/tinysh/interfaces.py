# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Protocol definitions for dependency injection.

These interfaces keep the kernel's dispatch logic independent of
process execution and configuration loading.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .executor import ProcessResult  # pragma: no cover


class Executor(Protocol):
    """Protocol for external command execution."""

    def run(
        self, full_path: str, args: list[str] | None = None,
        cwd: str | None = None
    ) -> ProcessResult:
        """Run an executable, capturing stdout and stderr combined."""
        ...


class ConfigModel(Protocol):
    """Protocol for configuration access."""

    @property
    def system(self) -> dict[str, Any]:
        """System configuration (prompt, ...)."""
        ...

    @property
    def execution(self) -> dict[str, Any]:
        """Execution configuration (timeout, ...)."""
        ...

    @property
    def ui(self) -> dict[str, Any]:
        """Interactive UI configuration."""
        ...

    def get_path(self, path: str, default: Any = None) -> Any:
        """Nested lookup using a dot-separated path."""
        ...
