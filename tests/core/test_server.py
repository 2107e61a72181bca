# tests/core/test_server.py
import pytest

from pagecraft.model import EngineSettings
from pagecraft.server.app import create_app


@pytest.fixture
def client():
    app = create_app(EngineSettings())
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok"}


def test_convert_returns_tree_and_diagnostics(client):
    resp = client.post("/api/convert", json={"html": '<div class="flex"><p>Hello</p></div>'})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["tree"]["kind"] == "Root"
    assert data["tree"]["children"][0]["kind"] == "Container"
    assert data["demoted"] is False
    assert data["hasWarnings"] is False
    assert data["diagnostics"] == []


def test_convert_reports_unsupported_structure(client):
    data = client.post("/api/convert", json={"html": "<canvas></canvas>"}).get_json()
    assert data["hasWarnings"] is True
    assert "UnsupportedStructure" in [d["code"] for d in data["diagnostics"]]


def test_convert_flat(client):
    data = client.post("/api/convert", json={"html": "<p>Hi</p>", "flat": True}).get_json()
    assert data["tree"]["ROOT"]["kind"] == "Root"
    assert len(data["tree"]) == 2


@pytest.mark.parametrize("body", [{}, {"html": ""}, {"html": "   "}, {"html": 42}])
def test_convert_invalid_input(client, body):
    resp = client.post("/api/convert", json=body)
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_convert_without_json_body(client):
    resp = client.post("/api/convert", data="geen json", content_type="text/plain")
    assert resp.status_code == 400


def test_convert_then_render(client):
    """De boom van /convert rendert via /render terug naar dezelfde markup."""
    html = '<div class="flex"><p>Hello</p></div>'
    tree = client.post("/api/convert", json={"html": html}).get_json()["tree"]

    resp = client.post("/api/render", json={"tree": tree})
    assert resp.status_code == 200
    assert resp.get_json()["html"] == html

    full = client.post("/api/render", json={"tree": tree, "fullDocument": True}).get_json()["html"]
    assert full.startswith("<!DOCTYPE html>")


def test_render_missing_tree(client):
    resp = client.post("/api/render", json={})
    assert resp.status_code == 400


def test_render_unknown_kind(client):
    resp = client.post("/api/render", json={"tree": {"kind": "Widget"}})
    assert resp.status_code == 422
    assert "error" in resp.get_json()


def test_render_non_tree_input(client):
    resp = client.post("/api/render", json={"tree": [1, 2, 3]})
    assert resp.status_code == 422


def test_convert_deeply_nested_page(client):
    """Een diep geneste pagina levert gewoon een boom op, geen 500."""
    html = "<div>" * 300 + "x" + "</div>" * 300
    resp = client.post("/api/convert", json={"html": html})
    assert resp.status_code == 200
    tree = resp.get_json()["tree"]
    depth = 0
    while tree["children"]:
        tree = tree["children"][0]
        depth += 1
    assert depth >= 300
