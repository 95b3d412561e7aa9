# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Executable lookup over a colon-separated search path.

Resolution is a *name* lookup, not a path lookup: the command name is
concatenated literally onto every search-path directory, even when it
contains a "/". So `resolve(("/usr",), "bin/ls")` checks "/usr/bin/ls".
"""

from __future__ import annotations

import os
import stat

# Owner, group or other execute bit
_ANY_EXEC_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def parse_search_path(value: str | None) -> tuple[str, ...]:
    """Split a PATH-style string into its directories, dropping empty ones."""
    if not value:
        return ()
    return tuple(d for d in value.split(":") if d)


def is_executable_file(path: str) -> bool:
    """True if `path` exists, is not a directory and has any execute bit."""
    try:
        st = os.stat(path)
    except (OSError, ValueError):
        return False
    if stat.S_ISDIR(st.st_mode):
        return False
    return bool(st.st_mode & _ANY_EXEC_BITS)


def resolve(
    search_path: tuple[str, ...] | list[str],
    name: str,
    cwd: str | None = None,
) -> str | None:
    """Find the first executable called `name` on the search path.

    Args:
        search_path: Ordered directories; the first match wins
        name: Command name to look up
        cwd: Directory that relative search-path entries are checked
            against (default: the process working directory)

    Returns:
        The candidate path exactly as formed ("<dir>/<name>"), or None
        when the search path or name is empty or nothing matches.
    """
    if not search_path or not name:
        return None

    for directory in search_path:
        if not directory:
            continue
        candidate = directory + "/" + name

        check = candidate
        if cwd is not None and not os.path.isabs(candidate):
            check = os.path.join(cwd, candidate)

        if is_executable_file(check):
            return candidate

    return None
