# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
tinysh kernel.

Session engine of the shell:
- builtin commands (exit, echo, type, pwd, cd)
- external command resolution over the search path
- execution through the injected Executor + output normalization

Important boundary:
- Kernel does not load YAML, read stdin or write stdout.
- handle_command() returns the text to print; the REPL loop prints it.
- `exit` does not end the process. It clears `running` and sets
  `exit_code`, and the REPL loop returns that status.
"""

from __future__ import annotations

import os
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime

from . import config as cfg_module
from .config import DEFAULT_PROMPT
from .interfaces import ConfigModel, Executor
from .resolver import parse_search_path, resolve
from .utils import normalize_output, parse_line

BUILTINS: tuple[str, ...] = ("echo", "type", "exit", "cd", "pwd")

PWD_ERROR = "error retrieving current directory"


def write_crash_log(
    error: Exception,
    raw_command: str = "",
    cwd: str = "",
) -> None:
    """Write an entry to the crash log.

    Logs unhandled exceptions raised while dispatching a command.
    Only creates the log directory when actually needed.
    Appends to crash.log (never overwrites).
    """
    try:
        log_path = cfg_module.crash_log_path(cfg_module.get_data_root())
        log_path.parent.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().isoformat()
        lines = [f"{timestamp}"]

        if raw_command:
            lines.append(f"raw={raw_command}")
        if cwd:
            lines.append(f"cwd={cwd}")

        lines.append(f"error={type(error).__name__}: {error}")
        lines.append("traceback:")
        lines.append(
            "".join(
                traceback.format_exception(
                    type(error), error, error.__traceback__
                )
            ).rstrip("\n")
        )
        lines.append("----")

        with log_path.open("a", encoding="utf-8") as f:
            f.write("\n".join(lines) + "\n")

    except Exception:
        # If we can't write the crash log, fail silently
        # (we're already in an error state)
        pass


def _current_dir() -> str:
    try:
        return os.getcwd()
    except OSError:
        return ""


@dataclass
class Kernel:
    """tinysh session engine."""

    executor: Executor
    config: ConfigModel | None = None

    # Session environment, fixed at startup
    search_path: tuple[str, ...] = ()
    home: str = ""

    # Working directory of this session (only `cd` changes it)
    cwd: str = field(default_factory=_current_dir)

    running: bool = False
    exit_code: int = 0

    # Exit status of the most recent external command (never printed)
    last_status: int | None = None

    @classmethod
    def from_environ(
        cls,
        executor: Executor,
        config: ConfigModel | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> Kernel:
        """Build a session from PATH and HOME (read once, here)."""
        env = os.environ if environ is None else environ
        return cls(
            executor=executor,
            config=config,
            search_path=parse_search_path(env.get("PATH", "")),
            home=env.get("HOME", ""),
        )

    # -----------------------
    # Session
    # -----------------------

    def start(self) -> None:
        """Start a tinysh session."""
        self.running = True
        self.exit_code = 0

    def prompt(self) -> str:
        """Return the prompt printed before each read."""
        sys_cfg = getattr(self.config, "system", {}) or {}
        prompt = sys_cfg.get("prompt", DEFAULT_PROMPT)
        return prompt if isinstance(prompt, str) else DEFAULT_PROMPT

    def resolve(self, name: str) -> str | None:
        """Resolve a command name on this session's search path."""
        return resolve(self.search_path, name, cwd=self.cwd or None)

    # -----------------------
    # Command handling
    # -----------------------

    def handle_command(self, line: str) -> str:
        """Handle a single command line and return the text to print."""
        cmd, args = parse_line(line)
        if not cmd:
            return ""

        if cmd == "exit":
            return self._handle_exit()

        if cmd == "echo":
            return self._handle_echo(args)

        if cmd == "type":
            return self._handle_type(args)

        if cmd == "pwd":
            return self._handle_pwd()

        if cmd == "cd":
            return self._handle_cd(args)

        return self._execute_external(cmd, args)

    # -----------------------
    # Builtins
    # -----------------------

    def _handle_exit(self) -> str:
        self.running = False
        self.exit_code = 0
        return ""

    def _handle_echo(self, args: list[str]) -> str:
        return " ".join(args) + "\n"

    def _handle_type(self, args: list[str]) -> str:
        """Report how a name would be interpreted."""
        if not args:
            return ": not found\n"

        name = args[0]
        if name in BUILTINS:
            return f"{name} is a shell builtin\n"

        full_path = self.resolve(name)
        if full_path is not None:
            return f"{name} is {full_path}\n"
        return f"{name}: not found\n"

    def _handle_pwd(self) -> str:
        # A session directory that has vanished cannot be reported
        if not self.cwd or not os.path.isdir(self.cwd):
            return PWD_ERROR + "\n"
        return self.cwd + "\n"

    def _handle_cd(self, args: list[str]) -> str:
        """Change the session working directory.

        `~` maps to the home directory; anything else is used as given,
        relative paths resolving against the session directory.
        """
        if not args:
            return "cd: : No such file or directory\n"

        target = args[0]
        if target == "~":
            target = self.home

        path = target
        if path and not os.path.isabs(path):
            path = os.path.join(self.cwd, path)

        # Checked as given: "missing/.." must fail like chdir(2) does
        if (not path or not os.path.isabs(path)
                or not os.path.isdir(path)
                or not os.access(path, os.X_OK)):
            return f"cd: {target}: No such file or directory\n"

        self.cwd = os.path.normpath(path)
        return ""

    # -----------------------
    # External commands
    # -----------------------

    def _execute_external(self, cmd: str, args: list[str]) -> str:
        """Resolve, run and normalize an external command.

        Calls executor.run() rather than a normalizing wrapper so the
        exit status can be kept in last_status.
        """
        full_path = self.resolve(cmd)
        if full_path is None:
            return f"{cmd}: not found\n"

        result = self.executor.run(full_path, args, cwd=self.cwd or None)
        self.last_status = result.exit_code
        return normalize_output(result.output)
