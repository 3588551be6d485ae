from __future__ import annotations

from collections.abc import Callable

from fastapi.testclient import TestClient

from app.config import AppSettings, WebSettings
from app.web_main import create_app
from tests.helpers.process_fixtures import load_process_text


def _client(settings: AppSettings) -> TestClient:
    return TestClient(create_app(settings))


def test_render_endpoint(app_settings: AppSettings) -> None:
    client = _client(app_settings)

    response = client.post("/api/diagram", json={"text": load_process_text("quickstart.txt")})

    assert response.status_code == 200
    payload = response.json()
    assert payload["gridWidth"] == 800.0
    node_ids = [node["id"] for node in payload["nodes"]]
    assert node_ids[:3] == ["pool-Customer", "start", "end"]
    assert payload["edges"][2]["preferredExitSide"] == "primary"


def test_parse_endpoint_reports_records(app_settings: AppSettings) -> None:
    client = _client(app_settings)

    response = client.post(
        "/api/parse", json={"text": "pool: A\ntask: t1 [A] X\ntask: t1 [A] Y\nflow: t1 --> t1"}
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["containers"] == [{"name": "A"}]
    assert [element["label"] for element in payload["elements"]] == ["X", "Y"]
    assert payload["connections"][0]["kind"] == "message"
    assert payload["duplicate_element_ids"] == ["t1"]


def test_syntax_endpoint(app_settings: AppSettings) -> None:
    payload = _client(app_settings).get("/api/syntax").json()

    assert payload["keywords"][0] == "pool:"
    assert payload["arrows"]["..>"] == "association"
    assert payload["line_styles"]["message"] == "dashed-fine"


def test_session_flow(app_settings: AppSettings) -> None:
    client = _client(app_settings)

    initial = client.get("/api/session").json()
    assert initial == {"revision": 0, "error": None, "diagram": None, "source": ""}

    updated = client.put("/api/session/source", json={"text": "pool: A\ntask: t1 [A] One"}).json()
    assert updated["revision"] == 1
    assert updated["error"] is None
    assert any(node["id"] == "t1" for node in updated["diagram"]["nodes"])

    dismissed = client.delete("/api/session/error").json()
    assert dismissed["diagram"] == updated["diagram"]


def test_initial_source_is_rendered(app_settings_factory: Callable[..., AppSettings]) -> None:
    settings = app_settings_factory(web=WebSettings(initial_source="pool: Start"))

    payload = _client(settings).get("/api/session").json()

    assert payload["revision"] == 1
    assert payload["diagram"]["nodes"][0]["id"] == "pool-Start"
