from __future__ import annotations

from playfeed.instrumentation import MUTE_SCRIPT, START_GAME_SCRIPT, UNMUTE_SCRIPT


def _preload(client, game_id: str) -> dict:
    resp = client.post("/pool/preload", json={"game_id": game_id, "url": f"https://games.example/{game_id}/"})
    assert resp.status_code == 200
    return resp.json()


def test_preload_and_snapshot(app_pool) -> None:
    client, _, _ = app_pool

    first = _preload(client, "A")
    again = _preload(client, "A")
    assert first["admitted"] is True
    assert again["admitted"] is False

    snap = client.get("/pool").json()
    assert snap["capacity"] == 4
    assert snap["active_id"] is None
    assert [e["id"] for e in snap["entries"]] == ["A"]
    assert snap["entries"][0]["state"] == "loading"


def test_capacity_scenario_over_http(app_pool) -> None:
    client, _, pool = app_pool
    for gid in ("A", "B", "C", "D"):
        _preload(client, gid)
    assert client.post("/pool/active/A").status_code == 200

    body = _preload(client, "E")

    ids = [e["id"] for e in body["pool"]["entries"]]
    assert len(ids) == 4
    assert "E" in ids
    assert "A" in ids
    assert pool.active_id == "A"


def test_set_active_unknown_is_404(app_pool) -> None:
    client, _, _ = app_pool
    resp = client.post("/pool/active/nope")
    assert resp.status_code == 404


def test_switching_issues_mute_then_unmute(app_pool, factory) -> None:
    client, _, _ = app_pool
    _preload(client, "A")
    _preload(client, "B")

    client.post("/pool/active/A")
    snap = client.post("/pool/active/B").json()

    assert snap["active_id"] == "B"
    assert factory.log[-2:] == [("A", MUTE_SCRIPT), ("B", UNMUTE_SCRIPT)]


def test_lookups_never_404_for_loaded(app_pool, factory) -> None:
    client, _, _ = app_pool
    assert client.get("/pool/ghost/loaded").json() == {"game_id": "ghost", "loaded": False}
    assert client.get("/pool/ghost").status_code == 404

    _preload(client, "A")
    factory.latest("A").finish_load()
    assert client.get("/pool/A/loaded").json()["loaded"] is True
    assert client.get("/pool/A").json()["state"] == "ready"


def test_inject_start_and_reload(app_pool, factory) -> None:
    client, _, _ = app_pool
    _preload(client, "A")

    resp = client.post("/pool/A/inject", json={"script": "window.x = 1; true;"})
    assert resp.status_code == 202
    assert client.post("/pool/ghost/inject", json={"script": "1"}).json()["resident"] is False

    assert client.post("/pool/A/start").status_code == 202
    assert factory.latest("A").instructions == ["window.x = 1; true;", START_GAME_SCRIPT]

    assert client.post("/pool/A/reload").status_code == 202
    assert factory.latest("A").reload_count == 1
    assert client.post("/pool/ghost/reload").status_code == 404


def test_loaded_ingress_does_not_resurrect(app_pool) -> None:
    client, _, _ = app_pool
    resp = client.post("/pool/ghost/loaded")
    assert resp.status_code == 202
    assert resp.json()["loaded"] is False
    assert client.get("/pool").json()["entries"] == []


def test_message_ingress_records_scores(app_pool) -> None:
    client, r, _ = app_pool
    _preload(client, "A")

    assert client.post("/pool/A/messages", json={"payload": "{not valid}"}).status_code == 202
    assert client.post("/pool/A/messages", json={"payload": '{"type":"gameOver","score":2450}'}).status_code == 202
    # non-resident ids are ignored
    client.post("/pool/ghost/messages", json={"payload": '{"type":"gameOver","score":9999}'})

    assert client.get("/scores/A").json() == {"game_id": "A", "score": 2450.0}
    assert client.get("/scores/ghost").status_code == 404
    assert [s["game_id"] for s in client.get("/scores").json()["scores"]] == ["A"]

    events = client.get("/surfaces/A/events").json()["events"]
    assert [e["data"] for e in events] == [{"type": "gameOver", "score": 2450}]


def test_scroll_mode_toggles_interactive(app_pool) -> None:
    client, _, _ = app_pool
    _preload(client, "A")
    client.post("/pool/active/A")

    snap = client.put("/pool/scroll_mode", json={"enabled": False}).json()
    assert snap["scroll_mode"] is False
    assert snap["entries"][0]["interactive"] is True

    snap = client.put("/pool/scroll_mode", json={"enabled": True}).json()
    assert snap["entries"][0]["interactive"] is False


def test_feed_generate_and_window(app_pool) -> None:
    client, _, pool = app_pool

    resp = client.post(
        "/feed/generate",
        json={"games": [{"id": "stack-tower", "name": "Stack Tower"}, {"id": "orbit"}], "count": 8},
    )
    assert resp.status_code == 200
    items = resp.json()["items"]
    assert len(items) == 8

    snap = client.post("/feed/window", json={"items": items, "active_index": 2}).json()
    assert snap["active_id"] == items[2]["unique_id"]
    assert [e["id"] for e in snap["entries"]] == [i["unique_id"] for i in items[2:6]]

    resp = client.post("/feed/window", json={"items": items, "active_index": 8})
    assert resp.status_code == 422
    assert pool.active_id == items[2]["unique_id"]
