from __future__ import annotations

from typing import Dict, Protocol

from domain.models import LayoutPlan, ProcessDocument, RankedNode, RankGraph


class RankSolver(Protocol):
    def solve(self, graph: RankGraph) -> Dict[str, RankedNode]:
        ...


class LayoutEngine(Protocol):
    def build_plan(self, document: ProcessDocument) -> LayoutPlan:
        ...
