from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from adapters.layout.grid import LayoutConfig
from adapters.layout.rank_solver import LayeredRankSolver, SolverConfig

DEFAULT_CONFIG_PATH = Path("config/flowlane.yaml")


class LayoutSettings(BaseModel):
    grid_padding: float = Field(default=200.0, ge=0)
    min_grid_width: float = Field(default=800.0, ge=0)
    header_width: float = Field(default=40.0, ge=0)
    container_gap: float = Field(default=50.0, ge=0)
    lane_min_height: float = Field(default=150.0, gt=0)
    lane_padding: float = Field(default=80.0, ge=0)
    root_band_height: float = Field(default=200.0, gt=0)

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(**self.model_dump())


class SolverSettings(BaseModel):
    node_sep: float = Field(default=50.0, ge=0)
    rank_sep: float = Field(default=60.0, ge=0)
    ordering_sweeps: int = Field(default=4, ge=0)

    def to_solver(self) -> LayeredRankSolver:
        return LayeredRankSolver(SolverConfig(**self.model_dump()))


class WebSettings(BaseModel):
    title: str = "Flowlane"
    initial_source: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: object) -> str:
        normalized = str(value or "").strip()
        return normalized or "Flowlane"


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FLOWLANE_", env_nested_delimiter="__")

    layout: LayoutSettings = LayoutSettings()
    solver: SolverSettings = SolverSettings()
    web: WebSettings = WebSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("FLOWLANE_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
