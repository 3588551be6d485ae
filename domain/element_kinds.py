from __future__ import annotations

from dataclasses import dataclass

from domain.models import ContentElement, Size


@dataclass(frozen=True)
class ElementShape:
    sizing_hint: Size
    rendered_size: Size
    anchor_offset: float
    icon: str | None = None


_SIZING_BY_KIND: dict[str, Size] = {
    "activity": Size(140, 60),
    "decision": Size(60, 60),
    "event": Size(50, 50),
    "data": Size(60, 70),
    "annotation": Size(120, 50),
}
_RENDERED_BY_KIND: dict[str, Size] = {
    "activity": Size(140, 60),
    "decision": Size(56, 56),
    "event": Size(40, 40),
    "data": Size(40, 50),
    "annotation": Size(120, 40),
}
_GATEWAY_ICONS: dict[str, str] = {
    "xor": "X",
    "and": "+",
    "or": "O",
    "event-based": "pentagon",
    "complex": "*",
}
_EVENT_ICON_KEYWORDS: tuple[str, ...] = (
    "timer",
    "message",
    "error",
    "terminate",
    "signal",
    "escalation",
)
_TASK_ICONS: dict[str, str] = {
    "user": "user",
    "service": "service",
    "script": "script",
    "manual": "manual",
    "send": "send",
    "receive": "receive",
    "business-rule": "business-rule",
}
_DEFAULT_KIND = "activity"


def sizing_hint(kind: str) -> Size:
    return _SIZING_BY_KIND.get(kind, _SIZING_BY_KIND[_DEFAULT_KIND])


def rendered_size(kind: str) -> Size:
    return _RENDERED_BY_KIND.get(kind, _RENDERED_BY_KIND[_DEFAULT_KIND])


def anchor_offset(kind: str) -> float:
    """Distance from a shape's top edge to the line its connections run through."""
    return rendered_size(kind).height / 2


def resolve_icon(kind: str, variant: str | None) -> str | None:
    normalized = (variant or "").strip().lower()
    if kind == "decision":
        return _GATEWAY_ICONS.get(normalized)
    if kind == "event":
        for keyword in _EVENT_ICON_KEYWORDS:
            if keyword in normalized:
                return keyword
        return None
    if kind == "activity":
        return _TASK_ICONS.get(normalized)
    return None


def shape_for(element: ContentElement) -> ElementShape:
    return ElementShape(
        sizing_hint=sizing_hint(element.kind),
        rendered_size=rendered_size(element.kind),
        anchor_offset=anchor_offset(element.kind),
        icon=resolve_icon(element.kind, element.variant),
    )
