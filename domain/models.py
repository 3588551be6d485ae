from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

ElementKind = Literal["activity", "event", "decision", "data", "annotation"]
ConnectionKind = Literal["sequence", "message", "association"]
ExitSide = Literal["primary", "secondary"]
EventPosition = Literal["start", "end", "intermediate"]

TASK_MARKERS: tuple[str, ...] = ("loop", "parallel", "sequential", "compensation")
TASK_VARIANT_DEFAULT = "user"
TASK_VARIANT_LEGACY = "generic"
GATEWAY_VARIANT_DEFAULT = "xor"


class DiagramLayoutError(ValueError):
    """Structural failure of a whole pipeline run."""


class Container(BaseModel):
    name: str = Field(..., min_length=1)


class SubContainer(BaseModel):
    container: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)


class ContentElement(BaseModel):
    id: str = Field(..., min_length=1)
    container: str
    label: str
    kind: ElementKind
    variant: Optional[str] = None
    markers: List[str] = Field(default_factory=list)

    @field_validator("markers", mode="after")
    @classmethod
    def ensure_unique_markers(cls, markers: List[str]) -> List[str]:
        return list(dict.fromkeys(markers))

    @property
    def event_position(self) -> EventPosition | None:
        if self.kind != "event":
            return None
        subtype = (self.variant or self.id).lower()
        if "start" in subtype:
            return "start"
        if "end" in subtype:
            return "end"
        return "intermediate"


class Connection(BaseModel):
    source: str = Field(..., min_length=1)
    target: str = Field(..., min_length=1)
    label: Optional[str] = None
    kind: ConnectionKind = "sequence"


class ProcessDocument(BaseModel):
    containers: List[Container] = Field(default_factory=list)
    sub_containers: List[SubContainer] = Field(default_factory=list)
    elements: List[ContentElement] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)

    def element_index(self) -> Dict[str, ContentElement]:
        # First definition of an id wins.
        index: Dict[str, ContentElement] = {}
        for element in self.elements:
            index.setdefault(element.id, element)
        return index

    def unique_elements(self) -> List[ContentElement]:
        return list(self.element_index().values())

    def duplicate_element_ids(self) -> List[str]:
        counts = Counter(element.id for element in self.elements)
        return [element_id for element_id, count in counts.items() if count > 1]

    def sub_containers_of(self, container_name: str) -> List[SubContainer]:
        return [lane for lane in self.sub_containers if lane.container == container_name]


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class RankGraph:
    nodes: Dict[str, Size]
    edges: List[tuple[str, str]]


@dataclass(frozen=True)
class RankedNode:
    x: float
    y: float
    width: float
    height: float

    @property
    def right_edge(self) -> float:
        return self.x + self.width / 2


@dataclass(frozen=True)
class PositionedNode:
    node_id: str
    kind: str  # element kind, "container" or "sub_container"
    label: str
    position: Point
    size: Size
    parent_id: str | None = None
    variant: str | None = None
    markers: tuple[str, ...] = ()
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.node_id,
            "kind": self.kind,
            "variant": self.variant,
            "label": self.label,
            "x": self.position.x,
            "y": self.position.y,
            "parentId": self.parent_id,
            "width": self.size.width,
            "height": self.size.height,
            "markers": list(self.markers),
            "icon": self.icon,
        }


@dataclass(frozen=True)
class LayoutPlan:
    nodes: List[PositionedNode]
    grid_width: float


@dataclass(frozen=True)
class DrawableEdge:
    edge_id: str
    source_id: str
    target_id: str
    kind: ConnectionKind
    line_style: str
    visual_variant: str
    label: str | None = None
    preferred_exit_side: ExitSide | None = None
    arrowhead: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.edge_id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "label": self.label,
            "preferredExitSide": self.preferred_exit_side,
            "lineStyle": self.line_style,
            "kindKeyedVisualVariant": self.visual_variant,
            "arrowhead": self.arrowhead,
        }


@dataclass(frozen=True)
class DiagramLayout:
    nodes: List[PositionedNode] = field(default_factory=list)
    edges: List[DrawableEdge] = field(default_factory=list)
    grid_width: float = 0.0

    def node(self, node_id: str) -> PositionedNode | None:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None

    def children_of(self, parent_id: str) -> List[PositionedNode]:
        return [node for node in self.nodes if node.parent_id == parent_id]

    def absolute_position(self, node_id: str) -> Point:
        node = self.node(node_id)
        if node is None:
            msg = f"Unknown node: {node_id}"
            raise KeyError(msg)
        x, y = node.position.x, node.position.y
        parent_id = node.parent_id
        while parent_id is not None:
            parent = self.node(parent_id)
            if parent is None:
                break
            x += parent.position.x
            y += parent.position.y
            parent_id = parent.parent_id
        return Point(x, y)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gridWidth": self.grid_width,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
