from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal

from domain.models import ContentElement, ProcessDocument, SubContainer

BucketKind = Literal["sub_container", "container_root", "unassigned"]

UNASSIGNED_BUCKET_ID = "bucket-unassigned"


@dataclass(frozen=True)
class Bucket:
    kind: BucketKind
    container: str = ""
    name: str = ""

    @property
    def bucket_id(self) -> str:
        if self.kind == "sub_container":
            return sub_container_node_id(self.container, self.name)
        if self.kind == "container_root":
            return f"pool-root-{self.container}"
        return UNASSIGNED_BUCKET_ID


UNASSIGNED = Bucket(kind="unassigned")


def container_node_id(container: str) -> str:
    return f"pool-{container}"


def sub_container_node_id(container: str, name: str) -> str:
    return f"lane-{container}-{name}"


def bucket_for_sub_container(lane: SubContainer) -> Bucket:
    return Bucket(kind="sub_container", container=lane.container, name=lane.name)


@dataclass(frozen=True)
class ContainmentAssignment:
    by_element: Dict[str, Bucket] = field(default_factory=dict)
    members: Dict[Bucket, List[str]] = field(default_factory=dict)

    def bucket_of(self, element_id: str) -> Bucket:
        return self.by_element.get(element_id, UNASSIGNED)

    def members_of(self, bucket: Bucket) -> List[str]:
        return list(self.members.get(bucket, []))


def resolve_bucket(hint: str, document: ProcessDocument) -> Bucket:
    for lane in document.sub_containers:
        if lane.name == hint:
            return bucket_for_sub_container(lane)
    for container in document.containers:
        if container.name == hint:
            owned = document.sub_containers_of(container.name)
            if owned:
                return bucket_for_sub_container(owned[0])
            return Bucket(kind="container_root", container=container.name)
    if document.sub_containers:
        return bucket_for_sub_container(document.sub_containers[0])
    return UNASSIGNED


def resolve_containment(
    document: ProcessDocument,
    elements: List[ContentElement] | None = None,
) -> ContainmentAssignment:
    by_element: Dict[str, Bucket] = {}
    members: Dict[Bucket, List[str]] = {}
    for element in elements if elements is not None else document.unique_elements():
        if element.id in by_element:
            continue
        bucket = resolve_bucket(element.container, document)
        by_element[element.id] = bucket
        members.setdefault(bucket, []).append(element.id)
    return ContainmentAssignment(by_element=by_element, members=members)
