from __future__ import annotations

import logging
import math
from typing import Dict, List

from domain.element_kinds import sizing_hint
from domain.models import (
    ContentElement,
    DiagramLayoutError,
    ProcessDocument,
    RankedNode,
    RankGraph,
    Size,
)
from domain.ports.layout import RankSolver

logger = logging.getLogger(__name__)


class FlowRankAdapter:
    def __init__(self, solver: RankSolver) -> None:
        self.solver = solver

    def build_graph(self, elements: List[ContentElement], document: ProcessDocument) -> RankGraph:
        nodes: Dict[str, Size] = {}
        for element in elements:
            size = sizing_hint(element.kind)
            if not (math.isfinite(size.width) and math.isfinite(size.height)):
                msg = f"Invalid sizing hint for node {element.id}: {size.width}x{size.height}"
                raise DiagramLayoutError(msg)
            nodes[element.id] = size

        edges: List[tuple[str, str]] = []
        for connection in document.connections:
            if connection.source in nodes and connection.target in nodes:
                edges.append((connection.source, connection.target))
            else:
                logger.warning(
                    "Skipping dangling connection %s -> %s", connection.source, connection.target
                )
        return RankGraph(nodes=nodes, edges=edges)

    def rank(self, elements: List[ContentElement], document: ProcessDocument) -> Dict[str, RankedNode]:
        graph = self.build_graph(elements, document)
        try:
            ranked = self.solver.solve(graph)
        except DiagramLayoutError:
            raise
        except Exception as exc:
            raise DiagramLayoutError(str(exc)) from exc
        for node_id in graph.nodes:
            if node_id not in ranked:
                msg = f"Rank solver returned no position for node: {node_id}"
                raise DiagramLayoutError(msg)
        return ranked
