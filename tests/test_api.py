import pytest
from fastapi.testclient import TestClient

from main import create_app
from signage.config_loader import AppConfig

LOBBY = {
    "id": "lobby",
    "name": "Lobby",
    "items": [{"i": "a", "x": 0, "y": 0, "w": 4, "h": 4, "component": "weather", "props": {}}],
}


@pytest.fixture
def client(tmp_path):
    app = create_app(AppConfig(data_dir=str(tmp_path)))
    with TestClient(app) as client:
        yield client


def test_components_listing(client):
    types = [c["type"] for c in client.get("/api/components").json()]
    assert {"weather", "clock", "news", "web_viewer", "pv_flow", "slideshow", "custom"} <= set(types)


def test_layout_crud(client):
    assert client.post("/api/layouts", json=LOBBY).status_code == 200
    assert client.get("/api/layouts/lobby").json()["items"][0]["component"] == "weather"
    assert client.put("/api/layouts/other", json=LOBBY).status_code == 400
    assert client.get("/api/layouts/missing").status_code == 404
    assert client.delete("/api/layouts/lobby").status_code == 200
    assert client.delete("/api/layouts/lobby").status_code == 404


def test_validate_endpoint(client):
    broken = dict(LOBBY, id="broken", items=LOBBY["items"] + [{"i": "b", "x": 2, "y": 2, "w": 4, "h": 4}])
    client.post("/api/layouts", json=broken)
    body = client.get("/api/layouts/broken/validate").json()
    assert not body["valid"]
    assert body["errors"] == ["Items a and b overlap"]


def test_drag_drop_through_events(client):
    client.post("/api/layouts", json=LOBBY)

    start = client.post(
        "/api/editor/lobby/events",
        json={"kind": "drag_start", "component_type": "weather", "cell_x": 2, "cell_y": 2},
    ).json()
    assert start["drag"]["phase"] == "dragging"
    assert start["drag"]["snap_position"] == {"x": 4, "y": 2}
    assert start["result"] is None

    drop = client.post("/api/editor/lobby/events", json={"kind": "drop"}).json()
    assert drop["result"]["applied"]
    assert drop["drag"]["phase"] == "idle"
    assert len(drop["items"]) == 2

    stored = client.get("/api/layouts/lobby").json()
    assert [(i["x"], i["y"]) for i in stored["items"]] == [(0, 0), (4, 2)]

    history = client.get("/api/editor/lobby/history").json()
    assert len(history) == 1
    assert history[0]["revision"] == 1


def test_blocked_keyboard_move_is_not_persisted(client):
    layout = dict(LOBBY, items=LOBBY["items"] + [{"i": "b", "x": 4, "y": 0, "w": 2, "h": 2, "component": "clock"}])
    client.post("/api/layouts", json=layout)
    client.post("/api/editor/lobby/events", json={"kind": "select", "item_id": "a"})
    body = client.post("/api/editor/lobby/events", json={"kind": "key_move", "direction": "right"}).json()
    assert body["result"]["reason"] == "blocked"
    assert body["selection"]["selected_id"] == "a"
    assert client.get("/api/editor/lobby/history").json() == []


def test_malformed_event_is_bad_request(client):
    client.post("/api/layouts", json=LOBBY)
    assert client.post("/api/editor/lobby/events", json={"kind": "drag_move"}).status_code == 400
    assert client.post("/api/editor/missing/events", json={"kind": "cancel"}).status_code == 404


def test_non_finite_pointer_is_bad_request(client):
    client.post("/api/layouts", json=LOBBY)
    client.post("/api/editor/lobby/events", json={"kind": "drag_start", "component_type": "clock"})
    r = client.post(
        "/api/editor/lobby/events",
        content='{"kind": "drag_move", "cell_x": Infinity, "cell_y": 1}',
        headers={"Content-Type": "application/json"},
    )
    assert r.status_code == 400
    assert client.get("/api/editor/lobby").json()["drag"]["phase"] == "dragging"


def test_drag_state_lists_colliding_items(client):
    client.post("/api/layouts", json=LOBBY)
    body = client.post(
        "/api/editor/lobby/events",
        json={"kind": "drag_start", "component_type": "clock", "cell_x": 1, "cell_y": 1},
    ).json()
    assert body["drag"]["colliding_ids"] == ["a"]


def test_resize_endpoint(client):
    client.post("/api/layouts", json=LOBBY)
    body = client.post("/api/editor/lobby/resize", json={"item_id": "a", "size": "medium"}).json()
    assert body["result"]["applied"]
    assert (body["items"][0]["w"], body["items"][0]["h"]) == (6, 4)
    assert client.post("/api/editor/lobby/resize", json={"item_id": "a"}).status_code == 400


def test_template_instantiation(client):
    client.post("/api/templates", json=dict(LOBBY, id="tpl", name="Weather board"))
    created = client.post("/api/templates/tpl/instantiate", params={"layout_id": "hall"}).json()
    assert created["id"] == "hall"
    assert created["name"] == "Weather board"
    assert len(created["items"]) == 1
    assert client.post("/api/templates/tpl/instantiate", params={"layout_id": "hall"}).status_code == 400
    assert client.post("/api/templates/none/instantiate", params={"layout_id": "x"}).status_code == 404


def test_put_refreshes_open_editor(client):
    client.post("/api/layouts", json=LOBBY)
    client.get("/api/editor/lobby")
    moved = dict(LOBBY, items=[dict(LOBBY["items"][0], x=10)])
    client.put("/api/layouts/lobby", json=moved)
    assert client.get("/api/editor/lobby").json()["items"][0]["x"] == 10
