from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import cast

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel

from app.config import AppSettings, load_settings
from app.diagram_wiring import build_generator, build_session
from domain.models import TASK_MARKERS, DiagramLayoutError
from domain.services.build_drawable_edges import EDGE_STYLES
from domain.services.generate_diagram import DiagramGenerator, DiagramSession
from domain.services.parse_process_text import KEYWORDS

logger = logging.getLogger(__name__)


class SourcePayload(BaseModel):
    text: str = ""


@dataclass(frozen=True)
class DiagramContext:
    settings: AppSettings
    generator: DiagramGenerator
    session: DiagramSession


def create_app(settings: AppSettings) -> FastAPI:
    app = FastAPI(title=settings.web.title)
    app.state.context = DiagramContext(
        settings=settings,
        generator=build_generator(settings),
        session=build_session(settings),
    )

    @app.get("/api/syntax")
    def api_syntax() -> ORJSONResponse:
        return ORJSONResponse(
            {
                "keywords": list(KEYWORDS),
                "comment_prefix": "#",
                "task_markers": list(TASK_MARKERS),
                "arrows": {"->": "sequence", "-->": "message", "..>": "association"},
                "line_styles": {kind: style[0] for kind, style in EDGE_STYLES.items()},
            }
        )

    @app.post("/api/parse")
    def api_parse(
        payload: SourcePayload,
        context: DiagramContext = Depends(get_context),
    ) -> ORJSONResponse:
        document = context.generator.parse(payload.text)
        body = document.model_dump(mode="json")
        body["duplicate_element_ids"] = document.duplicate_element_ids()
        return ORJSONResponse(body)

    @app.post("/api/diagram")
    def api_diagram(
        payload: SourcePayload,
        context: DiagramContext = Depends(get_context),
    ) -> ORJSONResponse:
        try:
            diagram = context.generator.generate(payload.text)
        except DiagramLayoutError as exc:
            logger.exception("Diagram generation failed.")
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return ORJSONResponse(diagram.to_dict())

    @app.get("/api/session")
    def api_session(context: DiagramContext = Depends(get_context)) -> ORJSONResponse:
        return ORJSONResponse(session_payload(context.session))

    @app.put("/api/session/source")
    def api_session_source(
        payload: SourcePayload,
        context: DiagramContext = Depends(get_context),
    ) -> ORJSONResponse:
        if not context.session.update(payload.text):
            logger.warning("Keeping previous diagram: %s", context.session.error)
        return ORJSONResponse(session_payload(context.session))

    @app.delete("/api/session/error")
    def api_session_dismiss_error(context: DiagramContext = Depends(get_context)) -> ORJSONResponse:
        context.session.dismiss_error()
        return ORJSONResponse(session_payload(context.session))

    return app


def get_context(request: Request) -> DiagramContext:
    return cast(DiagramContext, request.app.state.context)


def session_payload(session: DiagramSession) -> dict[str, object]:
    payload = session.to_dict()
    payload["source"] = session.source
    return payload


def create_default_app() -> FastAPI:
    return create_app(load_settings())
