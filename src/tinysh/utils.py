# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Utility functions for tinysh.
"""

from __future__ import annotations


def parse_line(line: str) -> tuple[str, list[str]]:
    """Split one input line into a command name and its arguments.

    The line is stripped and split on runs of whitespace. There is no
    quote or escape handling: every whitespace-separated token is taken
    literally.

    Args:
        line: Raw input line, with or without its line terminator

    Returns:
        (command, args). An empty or whitespace-only line gives ("", []),
        which callers treat as "nothing to do".
    """
    parts = line.strip().split()
    if not parts:
        return "", []
    return parts[0], parts[1:]


def normalize_output(data: bytes | str) -> str:
    """Normalize captured child-process output for printing.

    Rules, applied in order:
    1. every newline followed by a single space loses the space
    2. leading newlines are stripped
    3. exactly one newline is appended if the text does not end with one

    Empty output therefore normalizes to a single newline.

    Args:
        data: Captured output (bytes are decoded as UTF-8, replacing
            undecodable sequences)

    Returns:
        Normalized text, always ending with "\\n"
    """
    if isinstance(data, bytes):
        text = data.decode("utf-8", errors="replace")
    else:
        text = data

    text = text.replace("\n ", "\n")
    text = text.lstrip("\n")
    if not text.endswith("\n"):
        text += "\n"
    return text
