from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from adapters.layout.flow_rank import FlowRankAdapter
from adapters.layout.rank_solver import LayeredRankSolver
from domain.element_kinds import shape_for
from domain.models import (
    Container,
    ContentElement,
    LayoutPlan,
    Point,
    PositionedNode,
    ProcessDocument,
    RankedNode,
    Size,
    SubContainer,
)
from domain.ports.layout import LayoutEngine, RankSolver
from domain.services.resolve_containment import (
    UNASSIGNED,
    UNASSIGNED_BUCKET_ID,
    Bucket,
    ContainmentAssignment,
    bucket_for_sub_container,
    container_node_id,
    resolve_containment,
)

UNASSIGNED_LABEL = "Unassigned"


@dataclass(frozen=True)
class LayoutConfig:
    grid_padding: float = 200.0
    min_grid_width: float = 800.0
    header_width: float = 40.0
    container_gap: float = 50.0
    lane_min_height: float = 150.0
    lane_padding: float = 80.0
    root_band_height: float = 200.0


@dataclass(frozen=True)
class GridContext:
    document: ProcessDocument
    assignment: ContainmentAssignment
    ranked: Dict[str, RankedNode]
    elements: Dict[str, ContentElement]
    grid_width: float
    band_ids: Counter = field(default_factory=Counter)
    placed_buckets: Set[Bucket] = field(default_factory=set)
    placed_containers: Set[str] = field(default_factory=set)

    def members(self, bucket: Bucket) -> List[ContentElement]:
        return [self.elements[element_id] for element_id in self.assignment.members_of(bucket)]

    def claim_members(self, bucket: Bucket) -> List[ContentElement]:
        # Repeated bands stay empty; content is placed under the first one only.
        if bucket in self.placed_buckets:
            return []
        self.placed_buckets.add(bucket)
        return self.members(bucket)

    def claim_band_id(self, base_id: str) -> str:
        self.band_ids[base_id] += 1
        occurrence = self.band_ids[base_id]
        return base_id if occurrence == 1 else f"{base_id}#{occurrence}"


class StrictGridLayoutEngine(LayoutEngine):
    def __init__(self, config: LayoutConfig | None = None, solver: RankSolver | None = None) -> None:
        self.config = config or LayoutConfig()
        self.flow_rank = FlowRankAdapter(solver or LayeredRankSolver())

    def build_plan(self, document: ProcessDocument) -> LayoutPlan:
        elements = document.unique_elements()
        ranked = self.flow_rank.rank(elements, document)
        context = GridContext(
            document=document,
            assignment=resolve_containment(document, elements),
            ranked=ranked,
            elements={element.id: element for element in elements},
            grid_width=self.grid_width(ranked),
        )

        nodes: List[PositionedNode] = []
        offset = 0.0
        for container in self._band_containers(document):
            placed, offset = self._place_container(container, context, offset)
            nodes.extend(placed)
        if context.assignment.members_of(UNASSIGNED):
            placed, offset = self._place_unassigned(context, offset)
            nodes.extend(placed)
        return LayoutPlan(nodes=nodes, grid_width=context.grid_width)

    @staticmethod
    def _band_containers(document: ProcessDocument) -> List[Container]:
        declared = {container.name for container in document.containers}
        orphan_owners = dict.fromkeys(
            lane.container for lane in document.sub_containers if lane.container not in declared
        )
        return [*document.containers, *(Container(name=owner) for owner in orphan_owners)]

    def grid_width(self, ranked: Dict[str, RankedNode]) -> float:
        max_right_edge = max((node.right_edge for node in ranked.values()), default=0.0)
        return max(max_right_edge + self.config.grid_padding, self.config.min_grid_width)

    def _place_container(
        self, container: Container, context: GridContext, offset: float
    ) -> Tuple[List[PositionedNode], float]:
        container_id = context.claim_band_id(container_node_id(container.name))
        repeated = container.name in context.placed_containers
        context.placed_containers.add(container.name)
        lanes = [] if repeated else context.document.sub_containers_of(container.name)
        children: List[PositionedNode] = []
        height = 0.0
        if lanes:
            for lane in lanes:
                band, band_height = self._place_sub_container(lane, container_id, height, context)
                children.extend(band)
                height += band_height
        else:
            root_bucket = Bucket(kind="container_root", container=container.name)
            members = context.claim_members(root_bucket)
            children = self._place_flat_row(members, container_id, context)
            height = self.config.root_band_height

        container_node = PositionedNode(
            node_id=container_id,
            kind="container",
            label=container.name,
            position=Point(0.0, offset),
            size=Size(context.grid_width + self.config.header_width, height),
        )
        return [container_node, *children], offset + height + self.config.container_gap

    def _place_sub_container(
        self, lane: SubContainer, container_id: str, offset: float, context: GridContext
    ) -> Tuple[List[PositionedNode], float]:
        bucket = bucket_for_sub_container(lane)
        lane_id = context.claim_band_id(bucket.bucket_id)
        members = context.claim_members(bucket)
        ys = [context.ranked[element.id].y for element in members]
        span = (max(ys) - min(ys)) if ys else 0.0
        band_height = max(self.config.lane_min_height, span + self.config.lane_padding)
        group_center = (max(ys) + min(ys)) / 2 if ys else 0.0

        lane_node = PositionedNode(
            node_id=lane_id,
            kind="sub_container",
            label=lane.name,
            position=Point(self.config.header_width, offset),
            size=Size(context.grid_width, band_height),
            parent_id=container_id,
        )
        placed = [lane_node]
        for element in members:
            solved = context.ranked[element.id]
            shape = shape_for(element)
            y = band_height / 2 + (solved.y - group_center) - shape.anchor_offset
            placed.append(self._element_node(element, Point(solved.x, y), lane_id))
        return placed, band_height

    def _place_flat_row(
        self, members: List[ContentElement], parent_id: str, context: GridContext
    ) -> List[PositionedNode]:
        placed: List[PositionedNode] = []
        for element in members:
            solved = context.ranked[element.id]
            shape = shape_for(element)
            x = self.config.header_width + solved.x
            y = self.config.root_band_height / 2 - shape.anchor_offset
            placed.append(self._element_node(element, Point(x, y), parent_id))
        return placed

    def _place_unassigned(
        self, context: GridContext, offset: float
    ) -> Tuple[List[PositionedNode], float]:
        band = PositionedNode(
            node_id=UNASSIGNED_BUCKET_ID,
            kind="container",
            label=UNASSIGNED_LABEL,
            position=Point(0.0, offset),
            size=Size(
                context.grid_width + self.config.header_width, self.config.root_band_height
            ),
        )
        row = self._place_flat_row(context.members(UNASSIGNED), UNASSIGNED_BUCKET_ID, context)
        next_offset = offset + self.config.root_band_height + self.config.container_gap
        return [band, *row], next_offset

    @staticmethod
    def _element_node(element: ContentElement, position: Point, parent_id: str) -> PositionedNode:
        shape = shape_for(element)
        return PositionedNode(
            node_id=element.id,
            kind=element.kind,
            label=element.label,
            position=position,
            size=shape.rendered_size,
            parent_id=parent_id,
            variant=element.variant,
            markers=tuple(element.markers),
            icon=shape.icon,
        )
