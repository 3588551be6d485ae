from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from adapters.layout.grid import StrictGridLayoutEngine
from app.config import AppSettings, LayoutSettings, SolverSettings, WebSettings
from domain.services.generate_diagram import DiagramGenerator


def _clear_flowlane_env() -> None:
    for key in list(os.environ):
        if key.startswith("FLOWLANE_"):
            os.environ.pop(key, None)


_clear_flowlane_env()


@pytest.fixture(autouse=True)
def clear_flowlane_env() -> Generator[None, None, None]:
    _clear_flowlane_env()
    yield
    _clear_flowlane_env()


@pytest.fixture
def layout_engine() -> StrictGridLayoutEngine:
    return StrictGridLayoutEngine()


@pytest.fixture
def generator(layout_engine: StrictGridLayoutEngine) -> DiagramGenerator:
    return DiagramGenerator(layout_engine)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        layout=LayoutSettings(),
        solver=SolverSettings(),
        web=WebSettings(title="Test Flowlane"),
    )


@pytest.fixture
def app_settings_factory(app_settings: AppSettings) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return app_settings.model_copy(update=overrides)

    return _factory
