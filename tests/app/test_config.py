from __future__ import annotations

from pathlib import Path

import pytest

from adapters.layout.grid import LayoutConfig
from adapters.layout.rank_solver import SolverConfig
from app.config import AppSettings, LayoutSettings, load_settings


def test_defaults_match_layout_constants(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)

    settings = load_settings()

    assert settings.layout.to_layout_config() == LayoutConfig()
    assert settings.solver.to_solver().config == SolverConfig()
    assert settings.web.title == "Flowlane"


def test_env_overrides_nested_values(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FLOWLANE_LAYOUT__MIN_GRID_WIDTH", "1200")
    monkeypatch.setenv("FLOWLANE_SOLVER__RANK_SEP", "90")

    settings = load_settings()

    assert settings.layout.min_grid_width == 1200.0
    assert settings.solver.rank_sep == 90.0


def test_yaml_file_is_loaded(tmp_path: Path) -> None:
    config_path = tmp_path / "flowlane.yaml"
    config_path.write_text(
        "layout:\n  header_width: 60\nweb:\n  title: '  '\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.layout.header_width == 60.0
    assert settings.web.title == "Flowlane"
    assert AppSettings._yaml_path is None


def test_config_path_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    config_path = tmp_path / "custom.yaml"
    config_path.write_text("solver:\n  node_sep: 10\n", encoding="utf-8")
    monkeypatch.setenv("FLOWLANE_CONFIG_PATH", str(config_path))

    assert load_settings().solver.node_sep == 10.0


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="Config file not found"):
        load_settings(tmp_path / "missing.yaml")


def test_negative_sizes_are_rejected() -> None:
    with pytest.raises(ValueError):
        LayoutSettings(lane_min_height=0)
