from __future__ import annotations

import logging
from typing import Dict, List

from domain.models import (
    Connection,
    ContentElement,
    DrawableEdge,
    ExitSide,
    ProcessDocument,
)

logger = logging.getLogger(__name__)

AFFIRMATIVE_LABELS: frozenset[str] = frozenset({"true", "yes"})
NEGATIVE_LABELS: frozenset[str] = frozenset({"false", "no"})

# connection kind -> (line style, visual variant, arrowhead)
EDGE_STYLES: Dict[str, tuple[str, str, bool]] = {
    "sequence": ("solid", "sequence-flow", True),
    "message": ("dashed-fine", "message-flow", True),
    "association": ("dashed-sparse", "association", False),
}


def preferred_exit_side(label: str | None) -> ExitSide:
    normalized = (label or "").strip().lower()
    if normalized in AFFIRMATIVE_LABELS:
        return "primary"
    if normalized in NEGATIVE_LABELS:
        return "secondary"
    return "primary"


def build_drawable_edge(
    index: int, connection: Connection, source: ContentElement | None
) -> DrawableEdge:
    line_style, visual_variant, arrowhead = EDGE_STYLES[connection.kind]
    exit_side = None
    if source is not None and source.kind == "decision":
        exit_side = preferred_exit_side(connection.label)
    return DrawableEdge(
        edge_id=f"e{index}",
        source_id=connection.source,
        target_id=connection.target,
        kind=connection.kind,
        line_style=line_style,
        visual_variant=visual_variant,
        label=connection.label,
        preferred_exit_side=exit_side,
        arrowhead=arrowhead,
    )


def build_drawable_edges(document: ProcessDocument) -> List[DrawableEdge]:
    elements = document.element_index()
    edges: List[DrawableEdge] = []
    for index, connection in enumerate(document.connections):
        if connection.source not in elements or connection.target not in elements:
            logger.warning(
                "Dropping dangling connection %s -> %s", connection.source, connection.target
            )
            continue
        edges.append(build_drawable_edge(index, connection, elements[connection.source]))
    return edges
