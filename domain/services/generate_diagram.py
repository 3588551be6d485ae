from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.models import DiagramLayout, ProcessDocument
from domain.ports.layout import LayoutEngine
from domain.services.build_drawable_edges import build_drawable_edges
from domain.services.parse_process_text import ProcessTextParser

logger = logging.getLogger(__name__)


class DiagramGenerator:
    def __init__(self, layout_engine: LayoutEngine, parser: ProcessTextParser | None = None) -> None:
        self.layout_engine = layout_engine
        self.parser = parser or ProcessTextParser()

    def parse(self, text: str) -> ProcessDocument:
        return self.parser.parse(text)

    def generate(self, text: str) -> DiagramLayout:
        return self.layout(self.parse(text))

    def layout(self, document: ProcessDocument) -> DiagramLayout:
        plan = self.layout_engine.build_plan(document)
        return DiagramLayout(
            nodes=list(plan.nodes),
            edges=build_drawable_edges(document),
            grid_width=plan.grid_width,
        )


@dataclass
class DiagramSession:
    generator: DiagramGenerator
    diagram: DiagramLayout | None = None
    error: str | None = None
    source: str = ""
    revision: int = 0

    def update(self, text: str) -> bool:
        self.source = text
        try:
            diagram = self.generator.generate(text)
        except Exception as exc:  # noqa: BLE001
            logger.info("Diagram generation failed: %s", exc)
            self.error = str(exc)
            return False
        self.diagram = diagram
        self.error = None
        self.revision += 1
        return True

    def dismiss_error(self) -> None:
        self.error = None

    def to_dict(self) -> dict[str, object]:
        return {
            "revision": self.revision,
            "error": self.error,
            "diagram": self.diagram.to_dict() if self.diagram is not None else None,
        }
