from __future__ import annotations

import pytest

from domain.models import DrawableEdge
from domain.services.build_drawable_edges import build_drawable_edges, preferred_exit_side
from domain.services.parse_process_text import parse_process_text

_ELEMENTS = "\n".join(
    [
        "pool: P",
        "gateway: g [P] Decide?",
        "task: a [P] A",
        "task: b [P] B",
    ]
)


def _edges(*flows: str) -> list[DrawableEdge]:
    return build_drawable_edges(parse_process_text("\n".join([_ELEMENTS, *flows])))


@pytest.mark.parametrize(
    ("label", "side"),
    [
        ("Yes", "primary"),
        ("TRUE", "primary"),
        ("No", "secondary"),
        ("false", "secondary"),
        ("Maybe", "primary"),
        (None, "primary"),
        ("Not now", "primary"),
    ],
)
def test_preferred_exit_side(label: str | None, side: str) -> None:
    assert preferred_exit_side(label) == side


def test_decision_branches_get_exit_sides() -> None:
    yes_edge, no_edge, plain = _edges(
        "flow: g -> a [Yes]",
        "flow: g -> b [No]",
        "flow: g -> b",
    )

    assert yes_edge.preferred_exit_side == "primary"
    assert no_edge.preferred_exit_side == "secondary"
    assert plain.preferred_exit_side == "primary"


def test_non_decision_sources_get_no_exit_side() -> None:
    (edge,) = _edges("flow: a -> b [No]")

    assert edge.preferred_exit_side is None
    assert edge.label == "No"


def test_line_style_by_kind() -> None:
    sequence, message, association = _edges(
        "flow: a -> b",
        "flow: a --> b",
        "flow: a ..> b",
    )

    assert (sequence.line_style, sequence.arrowhead) == ("solid", True)
    assert (message.line_style, message.visual_variant) == ("dashed-fine", "message-flow")
    assert (association.line_style, association.arrowhead) == ("dashed-sparse", False)


def test_dangling_connections_are_dropped_and_ids_follow_connection_order() -> None:
    edges = _edges(
        "flow: a -> ghost",
        "flow: a -> b",
        "flow: ghost -> b",
        "flow: b -> g",
    )

    assert [(edge.edge_id, edge.source_id, edge.target_id) for edge in edges] == [
        ("e1", "a", "b"),
        ("e3", "b", "g"),
    ]
    assert edges[0].to_dict()["sourceId"] == "a"
    assert edges[0].to_dict()["kindKeyedVisualVariant"] == "sequence-flow"
