from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

import networkx as nx

from domain.models import RankedNode, RankGraph
from domain.ports.layout import RankSolver


@dataclass(frozen=True)
class SolverConfig:
    node_sep: float = 50.0
    rank_sep: float = 60.0
    ordering_sweeps: int = 4


class LayeredRankSolver(RankSolver):
    """Left-to-right layered placement; returned coordinates are node centers."""

    def __init__(self, config: SolverConfig | None = None) -> None:
        self.config = config or SolverConfig()

    def solve(self, graph: RankGraph) -> Dict[str, RankedNode]:
        if not graph.nodes:
            return {}
        digraph = self._build_digraph(graph)
        dag = self._break_cycles(digraph)
        ranks = self._assign_ranks(dag)
        layers = self._order_layers(dag, ranks)
        return self._assign_coordinates(dag, layers)

    def _build_digraph(self, graph: RankGraph) -> nx.DiGraph:
        digraph: nx.DiGraph = nx.DiGraph()
        for node_id, size in graph.nodes.items():
            digraph.add_node(node_id, width=size.width, height=size.height)
        for source, target in graph.edges:
            if source in digraph and target in digraph:
                digraph.add_edge(source, target)
        return digraph

    def _break_cycles(self, digraph: nx.DiGraph) -> nx.DiGraph:
        dag = digraph.copy()
        dag.remove_edges_from(list(nx.selfloop_edges(dag)))
        while True:
            try:
                cycle = nx.find_cycle(dag)
            except nx.NetworkXNoCycle:
                return dag
            # The closing edge of a DFS cycle points back to an ancestor.
            source, target = cycle[-1][0], cycle[-1][1]
            dag.remove_edge(source, target)

    def _assign_ranks(self, dag: nx.DiGraph) -> Dict[str, int]:
        ranks: Dict[str, int] = {}
        for node_id in nx.topological_sort(dag):
            ranks[node_id] = max((ranks[pred] + 1 for pred in dag.predecessors(node_id)), default=0)
        return ranks

    def _order_layers(self, dag: nx.DiGraph, ranks: Dict[str, int]) -> List[List[str]]:
        layer_count = max(ranks.values(), default=0) + 1
        layers: List[List[str]] = [[] for _ in range(layer_count)]
        for node_id in dag.nodes:
            layers[ranks[node_id]].append(node_id)

        for sweep in range(self.config.ordering_sweeps):
            downward = sweep % 2 == 0
            indices = range(1, layer_count) if downward else range(layer_count - 2, -1, -1)
            for layer_idx in indices:
                positions = self._positions(layers)
                keyed = [
                    (self._barycenter(dag, node_id, idx, positions, downward), idx, node_id)
                    for idx, node_id in enumerate(layers[layer_idx])
                ]
                layers[layer_idx] = [node_id for _, _, node_id in sorted(keyed)]
        return layers

    @staticmethod
    def _positions(layers: List[List[str]]) -> Dict[str, int]:
        return {node_id: idx for layer in layers for idx, node_id in enumerate(layer)}

    @staticmethod
    def _barycenter(
        dag: nx.DiGraph,
        node_id: str,
        current: int,
        positions: Dict[str, int],
        downward: bool,
    ) -> float:
        neighbors = list(dag.predecessors(node_id)) if downward else list(dag.successors(node_id))
        if not neighbors:
            return float(current)
        return sum(positions[n] for n in neighbors) / len(neighbors)

    def _assign_coordinates(self, dag: nx.DiGraph, layers: List[List[str]]) -> Dict[str, RankedNode]:
        node_sep = self.config.node_sep
        rank_sep = self.config.rank_sep

        layer_widths = [max((dag.nodes[n]["width"] for n in layer), default=0.0) for layer in layers]
        layer_heights = [
            sum(dag.nodes[n]["height"] for n in layer) + node_sep * max(len(layer) - 1, 0)
            for layer in layers
        ]
        tallest = max(layer_heights, default=0.0)

        placed: Dict[str, RankedNode] = {}
        left = 0.0
        for layer, layer_width, layer_height in zip(layers, layer_widths, layer_heights):
            center_x = left + layer_width / 2
            top = (tallest - layer_height) / 2
            for node_id in layer:
                width = float(dag.nodes[node_id]["width"])
                height = float(dag.nodes[node_id]["height"])
                placed[node_id] = RankedNode(x=center_x, y=top + height / 2, width=width, height=height)
                top += height + node_sep
            left += layer_width + rank_sep
        return placed
