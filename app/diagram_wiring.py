from __future__ import annotations

from adapters.layout.grid import StrictGridLayoutEngine
from app.config import AppSettings
from domain.services.generate_diagram import DiagramGenerator, DiagramSession


def build_layout_engine(settings: AppSettings) -> StrictGridLayoutEngine:
    return StrictGridLayoutEngine(
        config=settings.layout.to_layout_config(),
        solver=settings.solver.to_solver(),
    )


def build_generator(settings: AppSettings) -> DiagramGenerator:
    return DiagramGenerator(build_layout_engine(settings))


def build_session(settings: AppSettings) -> DiagramSession:
    session = DiagramSession(generator=build_generator(settings))
    if settings.web.initial_source:
        session.update(settings.web.initial_source)
    return session
