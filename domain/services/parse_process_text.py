from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pydantic import ValidationError

from domain.models import (
    GATEWAY_VARIANT_DEFAULT,
    TASK_MARKERS,
    TASK_VARIANT_DEFAULT,
    TASK_VARIANT_LEGACY,
    Connection,
    ConnectionKind,
    Container,
    ContentElement,
    ProcessDocument,
    SubContainer,
)

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
KEYWORDS: tuple[str, ...] = (
    "pool:",
    "lane:",
    "task:",
    "event:",
    "gateway:",
    "data:",
    "note:",
    "flow:",
)
LANE_SEPARATOR = ">"
LEGACY_EVENT_IDS: frozenset[str] = frozenset({"start", "end"})

_QUALIFIED_RE = re.compile(r"^(\w+)\s+\[([^\]]+?)\]\s+([^(]+?)\s*(?:\(([^)]*)\))?$")
_BRACKET_ONLY_RE = re.compile(r"^(\w+)\s+\[([^\]]+?)\]\s+(.+)$")
_FLOW_RE = re.compile(r"^(\w+)\s*(-{1,2}>|\.\.>)\s*(\w+)(?:\s*\[([^\]]*)\])?$")

_ARROW_KINDS: dict[str, ConnectionKind] = {
    "-->": "message",
    "..>": "association",
}

Record = Container | SubContainer | ContentElement | Connection


@dataclass
class DocumentAssembler:
    containers: list[Container] = field(default_factory=list)
    sub_containers: list[SubContainer] = field(default_factory=list)
    elements: list[ContentElement] = field(default_factory=list)
    connections: list[Connection] = field(default_factory=list)

    def add(self, record: Record) -> None:
        if isinstance(record, Container):
            self.containers.append(record)
        elif isinstance(record, SubContainer):
            self.sub_containers.append(record)
        elif isinstance(record, ContentElement):
            self.elements.append(record)
        else:
            self.connections.append(record)

    def build(self) -> ProcessDocument:
        return ProcessDocument(
            containers=list(self.containers),
            sub_containers=list(self.sub_containers),
            elements=list(self.elements),
            connections=list(self.connections),
        )


def split_options(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [token for token in (part.strip().lower() for part in raw.split(",")) if token]


def classify_task_options(raw: str | None) -> tuple[str, list[str]]:
    """Split task qualifiers into (variant, markers); the last non-marker token wins."""
    variant = TASK_VARIANT_DEFAULT
    markers: list[str] = []
    for token in split_options(raw):
        if token in TASK_MARKERS:
            markers.append(token)
        else:
            variant = token
    return variant, markers


def classify_arrow(arrow: str) -> ConnectionKind:
    return _ARROW_KINDS.get(arrow, "sequence")


def _qualified_or_bracketed(content: str) -> tuple[str, str, str, str | None] | None:
    # A label with a stray "(" keeps the whole remainder and no qualifier.
    match = _QUALIFIED_RE.match(content)
    if match:
        element_id, container, label, options = match.groups()
        return element_id, container, label, options
    match = _BRACKET_ONLY_RE.match(content)
    if match:
        element_id, container, label = match.groups()
        return element_id, container, label, None
    return None


class ProcessTextParser:
    def __init__(self) -> None:
        self._extractors: dict[str, Callable[[str], Record | None]] = {
            "pool:": self._extract_container,
            "lane:": self._extract_sub_container,
            "task:": self._extract_task,
            "event:": self._extract_event,
            "gateway:": self._extract_gateway,
            "data:": self._extract_data,
            "note:": self._extract_note,
            "flow:": self._extract_connection,
        }

    def parse(self, text: str) -> ProcessDocument:
        assembler = DocumentAssembler()
        for line_no, line in self._content_lines(text):
            record = self.parse_line(line)
            if record is None:
                logger.debug("Dropped line %d: %r", line_no, line)
                continue
            assembler.add(record)
        document = assembler.build()
        duplicates = document.duplicate_element_ids()
        if duplicates:
            logger.warning("Duplicate element ids, first definition wins: %s", duplicates)
        return document

    def parse_line(self, line: str) -> Record | None:
        keyword = classify_line(line)
        if keyword is None:
            return None
        remainder = line[len(keyword) :].strip()
        try:
            return self._extractors[keyword](remainder)
        except ValidationError:
            return None

    @staticmethod
    def _content_lines(text: str) -> Iterable[tuple[int, str]]:
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.strip()
            if not line or line.startswith(COMMENT_PREFIX):
                continue
            yield line_no, line

    def _extract_container(self, content: str) -> Container | None:
        if not content:
            return None
        return Container(name=content)

    def _extract_sub_container(self, content: str) -> SubContainer | None:
        if content.count(LANE_SEPARATOR) != 1:
            return None
        container, name = (part.strip() for part in content.split(LANE_SEPARATOR))
        if not container or not name:
            return None
        return SubContainer(container=container, name=name)

    def _extract_task(self, content: str) -> ContentElement | None:
        match = _QUALIFIED_RE.match(content)
        if match:
            element_id, container, label, options = match.groups()
            variant, markers = classify_task_options(options)
        else:
            match = _BRACKET_ONLY_RE.match(content)
            if not match:
                return None
            element_id, container, label = match.groups()
            variant, markers = TASK_VARIANT_LEGACY, []
        if element_id in LEGACY_EVENT_IDS:
            return ContentElement(
                id=element_id,
                container=container.strip(),
                label=label.strip(),
                kind="event",
                variant=element_id,
            )
        return ContentElement(
            id=element_id,
            container=container.strip(),
            label=label.strip(),
            kind="activity",
            variant=variant,
            markers=markers,
        )

    def _extract_event(self, content: str) -> ContentElement | None:
        groups = _qualified_or_bracketed(content)
        if groups is None:
            return None
        element_id, container, label, subtype = groups
        normalized = (subtype or "").strip().lower()
        return ContentElement(
            id=element_id,
            container=container.strip(),
            label=label.strip(),
            kind="event",
            variant=normalized or None,
        )

    def _extract_gateway(self, content: str) -> ContentElement | None:
        groups = _qualified_or_bracketed(content)
        if groups is None:
            return None
        element_id, container, label, subtype = groups
        return ContentElement(
            id=element_id,
            container=container.strip(),
            label=label.strip(),
            kind="decision",
            variant=(subtype or "").strip().lower() or GATEWAY_VARIANT_DEFAULT,
        )

    def _extract_data(self, content: str) -> ContentElement | None:
        return self._extract_plain(content, "data")

    def _extract_note(self, content: str) -> ContentElement | None:
        return self._extract_plain(content, "annotation")

    def _extract_plain(self, content: str, kind: str) -> ContentElement | None:
        match = _BRACKET_ONLY_RE.match(content)
        if not match:
            return None
        element_id, container, label = match.groups()
        return ContentElement(
            id=element_id,
            container=container.strip(),
            label=label.strip(),
            kind=kind,
        )

    def _extract_connection(self, content: str) -> Connection | None:
        match = _FLOW_RE.match(content)
        if not match:
            return None
        source, arrow, target, label = match.groups()
        return Connection(
            source=source,
            target=target,
            label=(label or "").strip() or None,
            kind=classify_arrow(arrow),
        )


def classify_line(line: str) -> str | None:
    for keyword in KEYWORDS:
        if line.startswith(keyword):
            return keyword
    return None


def parse_process_text(text: str) -> ProcessDocument:
    return ProcessTextParser().parse(text)
