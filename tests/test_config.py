from __future__ import annotations

from pathlib import Path

import pytest

from tinysh import config


@pytest.fixture
def tmp_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "home"
    home.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    return home


def test_get_data_root_prefers_tinysh_data_home(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """
    TINYSH_DATA_HOME wins when present.
    """
    monkeypatch.setenv("TINYSH_DATA_HOME", str(tmp_path / "data"))
    assert config.get_data_root() == tmp_path / "data"


def test_get_data_root_defaults_to_local_share(
    tmp_home: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.delenv("TINYSH_DATA_HOME", raising=False)
    assert config.get_data_root() == tmp_home / ".local" / "share"


def test_get_data_root_does_not_create_directories(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("TINYSH_DATA_HOME", str(tmp_path / "lazy"))
    config.get_data_root()
    assert not (tmp_path / "lazy").exists()


def test_crash_log_path_is_under_data_root(tmp_path: Path) -> None:
    """
    Crash log path must be:
      <data_root>/tinysh/logs/crash.log
    """
    assert config.crash_log_path(tmp_path) == (
        tmp_path / "tinysh" / "logs" / "crash.log"
    )


# ----------------------------------------------------------------
# Packaged defaults
# ----------------------------------------------------------------


def test_load_system_config_has_dollar_prompt() -> None:
    cfg = config.load_system_config()

    assert isinstance(cfg, config.YAMLConfig)
    assert cfg.system["prompt"] == "$ "


def test_load_system_config_defaults() -> None:
    cfg = config.load_system_config()

    assert cfg.timeout is None
    assert cfg.ui.get("enabled") is True
    assert cfg.get_path("ui.theme.style", None) == {}


def test_load_defaults_yaml_missing_file_raises() -> None:
    with pytest.raises(FileNotFoundError):
        config.load_defaults_yaml("does-not-exist.yaml")


def test_load_defaults_yaml_rejects_non_mapping(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "list.yaml").write_text("- a\n- b\n", encoding="utf-8")
    monkeypatch.setattr(config, "_defaults_dir", lambda: tmp_path)

    with pytest.raises(ValueError):
        config.load_defaults_yaml("list.yaml")


def test_load_defaults_yaml_empty_file_is_empty_mapping(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "empty.yaml").write_text("", encoding="utf-8")
    monkeypatch.setattr(config, "_defaults_dir", lambda: tmp_path)

    assert config.load_defaults_yaml("empty.yaml") == {}


# ----------------------------------------------------------------
# YAMLConfig
# ----------------------------------------------------------------


def test_yaml_config_get_path() -> None:
    cfg = config.YAMLConfig({"ui": {"theme": {"style": {"a": "b"}}}})

    assert cfg.get_path("ui.theme.style") == {"a": "b"}
    assert cfg.get_path("ui.theme.missing", 5) == 5
    assert cfg.get_path("ui.theme.style.a.deeper", "x") == "x"
    assert cfg.get_path("", "d") == "d"


def test_yaml_config_sections_default_to_empty() -> None:
    cfg = config.YAMLConfig({"system": "not a mapping"})

    assert cfg.system == {}
    assert cfg.execution == {}
    assert cfg.ui == {}
    assert cfg.get_path("system.prompt") is None


@pytest.mark.parametrize(
    "value, expected",
    [(None, None), (0, None), (-1, None), (True, None), ("5", None),
     (5, 5), (2.5, 2.5)],
)
def test_yaml_config_timeout(value, expected) -> None:
    cfg = config.YAMLConfig({"execution": {"timeout": value}})
    assert cfg.timeout == expected


def test_yaml_config_custom_prompt() -> None:
    cfg = config.YAMLConfig({"system": {"prompt": "> "}})
    assert cfg.system["prompt"] == "> "
