# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

from __future__ import annotations

import os
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion, merge_completers
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import print_formatted_text
from prompt_toolkit.styles import Style

from .kernel import BUILTINS
from .resolver import is_executable_file

if TYPE_CHECKING:
    from .kernel import Kernel  # pragma: no cover


# ----------------------------
# Config helpers (read through kernel.config.get_path)
# ----------------------------


def _cfg_get_path(kernel: Kernel | None, path: str, default):
    if kernel is None:
        return default
    cfg = getattr(kernel, "config", None)
    if cfg is None or not hasattr(cfg, "get_path"):
        return default
    try:
        return cfg.get_path(path, default)
    except Exception:
        return default


def _cfg_bool(kernel: Kernel | None, path: str, default: bool) -> bool:
    return bool(_cfg_get_path(kernel, path, default))


def _cfg_dict(kernel: Kernel | None, path: str, default: dict) -> dict:
    val = _cfg_get_path(kernel, path, default)
    return val if isinstance(val, dict) else default


# ----------------------------
# Theme / Style
# ----------------------------


def _default_style_dict() -> dict[str, str]:
    return {
        "completion-menu": "bg:#111111 #d0d0d0",
        "completion-menu.completion": "bg:#111111 #d0d0d0",
        "completion-menu.completion.current": "bg:#303030 #ffffff bold",
        "completion-menu.meta.completion": "bg:#111111 #808080",
        "completion-menu.meta.completion.current": "bg:#303030 #a0a0a0",
        "scrollbar.background": "bg:#202020",
        "scrollbar.button": "bg:#505050",
    }


def _build_style(kernel: Kernel | None) -> Style:
    base = _default_style_dict()
    overrides = _cfg_dict(kernel, "ui.theme.style", {})
    # only keep string->string
    for k, v in list(overrides.items()):
        if isinstance(k, str) and isinstance(v, str):
            base[k] = v
    return Style.from_dict(base)


# ----------------------------
# Completers
# ----------------------------


class CommandCompleter(Completer):
    """Completes the first token: builtins + executables on the search path."""

    def __init__(self, kernel: Kernel | None) -> None:
        self.kernel = kernel
        self._cache: set[str] | None = None
        self._cache_key: tuple[str, ...] | None = None

    def _load(self) -> set[str]:
        search_path = tuple(getattr(self.kernel, "search_path", ()) or ())
        if self._cache is not None and self._cache_key == search_path:
            return self._cache

        exes: set[str] = set()
        for directory in search_path:
            try:
                names = os.listdir(directory)
            except OSError:
                continue
            for name in names:
                if is_executable_file(directory + "/" + name):
                    exes.add(name)

        self._cache = exes
        self._cache_key = search_path
        return exes

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        before = (document.text_before_cursor or "").lstrip()

        # Past the first token: arguments are handled elsewhere
        if not before or " " in before:
            return

        for name in BUILTINS:
            if name.startswith(before):
                yield Completion(
                    name, start_position=-len(before),
                    display_meta="builtin"
                )

        for exe in sorted(self._load() - set(BUILTINS)):
            if exe.startswith(before):
                yield Completion(
                    exe, start_position=-len(before), display_meta="exe"
                )


class PathCompleter(Completer):
    """Filesystem path completion for arguments, relative to the session cwd."""

    def __init__(self, kernel: Kernel | None = None) -> None:
        self.kernel = kernel

    def _current_arg_token(self, text_before_cursor: str) -> str | None:
        """Return the argument fragment under the cursor.

        None while still on the command token.
        """
        stripped = text_before_cursor.lstrip()
        if " " not in stripped:
            return None
        if stripped.endswith(" "):
            return ""
        return stripped.split()[-1]

    def _session_dir(self) -> str:
        cwd = getattr(self.kernel, "cwd", "") if self.kernel else ""
        return cwd or "."

    def _list_dir(self, directory: str) -> list[str]:
        try:
            return sorted(os.listdir(directory))
        except OSError:
            return []

    def get_completions(
        self, document, complete_event
    ) -> Iterable[Completion]:
        token = self._current_arg_token(document.text_before_cursor or "")
        if token is None:
            return

        if token.endswith("/"):
            rel_dir = token
            prefix = ""
        else:
            rel_dir = os.path.dirname(token)
            prefix = os.path.basename(token)

        insert_prefix = rel_dir
        if insert_prefix and not insert_prefix.endswith("/"):
            insert_prefix += "/"

        base_dir = os.path.join(self._session_dir(), rel_dir)

        for name in self._list_dir(base_dir):
            if not name.startswith(prefix):
                continue
            # Hidden entries only when asked for
            if name.startswith(".") and not prefix.startswith("."):
                continue
            is_dir = os.path.isdir(os.path.join(base_dir, name))
            ins = f"{insert_prefix}{name}" + ("/" if is_dir else "")
            yield Completion(
                ins, start_position=-len(token),
                display_meta="dir" if is_dir else "file"
            )


def build_completer(kernel: Kernel | None) -> Completer:
    """Commands on the first token, paths after it."""
    return merge_completers([CommandCompleter(kernel), PathCompleter(kernel)])


# ----------------------------
# PromptSession UI
# ----------------------------


class PromptToolkitUI:
    """
    Terminal line editor for interactive sessions:
      - Keeps normal terminal scrollback + drag-select copy.
      - Tab completion of commands and paths.
      - Ctrl+L clears the screen.
    """

    def __init__(self, kernel: Kernel | None = None) -> None:
        self.kernel = kernel
        self.session: PromptSession[str] | None = None
        self._style = _build_style(kernel)

    def _ensure_session(self) -> None:
        if self.session is not None:
            return

        self.session = PromptSession(
            key_bindings=self.build_key_bindings(),
            completer=build_completer(self.kernel),
            complete_while_typing=_cfg_bool(
                self.kernel, "ui.complete_while_typing", False
            ),
            style=self._style,
        )

    # ---------- public API ----------

    def read(self, prompt: str) -> str:
        self._ensure_session()
        assert self.session is not None
        return self.session.prompt(prompt)

    def write(self, text: str) -> None:
        """Write EXACTLY what we receive (no extra newline)."""
        if not text:
            return
        print_formatted_text(ANSI(text), style=self._style, end="")

    # ---------- keybindings ----------

    def build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("c-l")
        def _(event):
            event.app.renderer.clear()

        return kb
