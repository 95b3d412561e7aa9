# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
tinysh CLI entry point and REPL loop.

Design:
- CLI owns process startup, environment reading and process exit.
- Kernel is the session engine (config + executor injected).
- UI is a prompt_toolkit PromptSession when attached to a terminal;
  otherwise plain input() so piped sessions get byte-exact output.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from typing import Protocol

from . import config
from .executor import SubprocessExecutor
from .kernel import Kernel, write_crash_log


class LineUI(Protocol):
    def read(self, prompt: str) -> str: ...

    def write(self, text: str) -> None: ...


def _write_stdout(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def run_repl(
    kernel: Kernel,
    ui: LineUI | None = None,
    input_fn: Callable[[str], str] | None = None,
    output_fn: Callable[[str], None] = _write_stdout,
) -> int:
    """Run the tinysh REPL loop and return the shell's exit status.

    input_fn defaults to the builtin input(), looked up per call.
    """
    write = ui.write if ui is not None else output_fn
    read = input_fn if input_fn is not None else input

    if not kernel.running:
        kernel.start()

    while kernel.running:
        try:
            prompt = kernel.prompt()

            if ui is not None:
                line = ui.read(prompt)
            else:
                line = read(prompt)

        except EOFError:
            # End of input: a normal exit
            return 0

        except KeyboardInterrupt:
            # Ctrl+C at the prompt drops the line
            write("\n")
            continue

        if not (line or "").strip():
            continue

        try:
            response = kernel.handle_command(line)
        except KeyboardInterrupt:
            # Ctrl+C while a child runs interrupts the child, not the shell
            write("\n")
            continue
        except Exception as e:
            # Unhandled exception - write crash log
            write_crash_log(e, raw_command=line, cwd=kernel.cwd)
            response = (
                f"tinysh: internal error: {type(e).__name__}: {e}\n"
            )

        if response:
            write(response)

    return kernel.exit_code


def _wants_prompt_toolkit(cfg: config.YAMLConfig) -> bool:
    if os.environ.get("TINYSH_LEGACY_UI") == "1":
        return False
    if not cfg.ui.get("enabled", True):
        return False
    return sys.stdin.isatty() and sys.stdout.isatty()


def main() -> None:
    """Main entry point for tinysh."""
    cfg = config.load_system_config()

    # Explicit wiring: config + executor injected into kernel.
    # PATH and HOME are read once, here.
    executor = SubprocessExecutor(timeout=cfg.timeout)
    kernel = Kernel.from_environ(executor, config=cfg)
    kernel.start()

    ui = None
    if _wants_prompt_toolkit(cfg):
        from .ui import PromptToolkitUI

        ui = PromptToolkitUI(kernel)

    sys.exit(run_repl(kernel, ui=ui))
