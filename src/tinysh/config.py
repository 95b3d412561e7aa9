# tinysh — Minimal Interactive Command Shell
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Configuration and data root resolution for tinysh.

Handles:
- Data root resolution (TINYSH_DATA_HOME, ~/.local/share)
- Crash log location
- Packaged YAML defaults loading (tinysh/defaults/*.yaml)
"""

from __future__ import annotations

import os
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PROMPT = "$ "


# -----------------------
# Config model wrapper
# -----------------------


class YAMLConfig:
    """Simple config wrapper that implements ConfigModel protocol."""

    def __init__(self, config_dict: dict[str, Any]):
        self._config = config_dict

    @property
    def system(self) -> dict[str, Any]:
        sys_cfg = self._config.get("system", {})
        return sys_cfg if isinstance(sys_cfg, dict) else {}

    @property
    def execution(self) -> dict[str, Any]:
        exec_cfg = self._config.get("execution", {})
        return exec_cfg if isinstance(exec_cfg, dict) else {}

    @property
    def ui(self) -> dict[str, Any]:
        ui_cfg = self._config.get("ui", {})
        return ui_cfg if isinstance(ui_cfg, dict) else {}

    @property
    def timeout(self) -> float | None:
        """Child process timeout in seconds, or None to wait forever."""
        value = self.execution.get("timeout")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value if value > 0 else None

    def get_path(self, path: str, default: Any = None) -> Any:
        """
        Nested lookup using dot-separated path.
        Example: get_path("ui.theme.style", {}) -> dict style mapping
        """
        if not path:
            return default

        cur: Any = self._config
        for part in path.split("."):
            if not isinstance(cur, dict):
                return default
            if part not in cur:
                return default
            cur = cur[part]
        return cur


# -----------------------
# Data root + log helpers
# -----------------------


def get_data_root() -> Path:
    """Get the data root directory for tinysh.

    Resolution order:
    1. TINYSH_DATA_HOME environment variable (if set)
    2. ~/.local/share (default)
    """
    data_home = os.getenv("TINYSH_DATA_HOME")
    if data_home:
        return Path(data_home)
    return Path.home() / ".local" / "share"


def crash_log_path(data_root: Path) -> Path:
    """<data_root>/tinysh/logs/crash.log"""
    return data_root / "tinysh" / "logs" / "crash.log"


# -----------------------
# Packaged defaults loading
# -----------------------


def _defaults_dir() -> Path:
    """Return the installed path to packaged defaults directory."""
    return Path(
        importlib_resources.files("tinysh.defaults")
    )  # type: ignore[arg-type]


def load_defaults_yaml(filename: str) -> dict[str, Any]:
    """
    Load a YAML file from tinysh/defaults/.
    """
    defaults_dir = _defaults_dir()
    path = defaults_dir / filename
    if not path.exists():
        raise FileNotFoundError(
            f"Missing defaults YAML: {filename} "
            f"(looked in {defaults_dir})"
        )

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(
            f"Defaults YAML {filename} must load to a mapping/dict."
        )
    return data


def load_system_config() -> YAMLConfig:
    """
    Load system.yaml from packaged defaults and return a YAMLConfig wrapper.
    """
    return YAMLConfig(load_defaults_yaml("system.yaml"))
