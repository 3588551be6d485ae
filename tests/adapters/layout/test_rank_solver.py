from __future__ import annotations

from adapters.layout.rank_solver import LayeredRankSolver, SolverConfig
from domain.models import RankGraph, Size

TASK = Size(140, 60)
EVENT = Size(50, 50)


def test_empty_graph() -> None:
    assert LayeredRankSolver().solve(RankGraph(nodes={}, edges=[])) == {}


def test_chain_flows_left_to_right() -> None:
    graph = RankGraph(
        nodes={"start": EVENT, "t1": TASK, "g1": Size(60, 60), "end": EVENT},
        edges=[("start", "t1"), ("t1", "g1"), ("g1", "end")],
    )

    ranked = LayeredRankSolver().solve(graph)

    assert [ranked[n].x for n in ("start", "t1", "g1", "end")] == [25.0, 180.0, 340.0, 455.0]
    assert {ranked[n].y for n in graph.nodes} == {30.0}
    assert ranked["end"].right_edge == 480.0
    assert (ranked["t1"].width, ranked["t1"].height) == (140.0, 60.0)


def test_separation_constants_are_configurable() -> None:
    graph = RankGraph(nodes={"a": TASK, "b": TASK}, edges=[("a", "b")])

    ranked = LayeredRankSolver(SolverConfig(rank_sep=100)).solve(graph)

    assert ranked["b"].x - ranked["a"].x == 240.0


def test_branches_stack_and_parent_is_centered() -> None:
    graph = RankGraph(nodes={"a": TASK, "b": TASK, "c": TASK}, edges=[("a", "b"), ("a", "c")])

    ranked = LayeredRankSolver().solve(graph)

    assert ranked["b"].x == ranked["c"].x
    assert ranked["c"].y - ranked["b"].y == 110.0
    assert ranked["a"].y == (ranked["b"].y + ranked["c"].y) / 2


def test_ordering_removes_crossings() -> None:
    graph = RankGraph(
        nodes={"a": TASK, "b": TASK, "c": TASK, "d": TASK},
        edges=[("a", "d"), ("b", "c")],
    )

    ranked = LayeredRankSolver().solve(graph)

    assert ranked["a"].y < ranked["b"].y
    assert ranked["d"].y < ranked["c"].y


def test_cycles_and_self_loops_are_tolerated() -> None:
    graph = RankGraph(
        nodes={"a": TASK, "b": TASK, "c": TASK},
        edges=[("a", "b"), ("b", "c"), ("c", "a"), ("b", "b")],
    )

    ranked = LayeredRankSolver().solve(graph)

    assert set(ranked) == {"a", "b", "c"}
    assert ranked["a"].x < ranked["b"].x < ranked["c"].x


def test_isolated_nodes_share_first_rank() -> None:
    graph = RankGraph(nodes={"a": TASK, "b": EVENT}, edges=[("a", "missing")])

    ranked = LayeredRankSolver().solve(graph)

    assert ranked["a"].x == ranked["b"].x == 70.0
