from __future__ import annotations

import pytest

pytest.importorskip("httpx", reason="httpx requis pour les tests client FastAPI")

import threading
import time
from unittest.mock import Mock

from fastapi.testclient import TestClient

import cluele.main as main_module
from cluele.main import app
from cluele.services.daily_game import get_daily_game
from cluele.services.preferences import PreferencesStore, get_preferences_store

from conftest import CITIES, make_client


@pytest.fixture
def install(make_game):
    """Branche sur l'app un jeu chargé depuis les faux catalogues (sans réseau, sans startup)."""
    def _install(test_mode: bool = False):
        game = make_game(test_mode=test_mode)
        game.load_catalogs()
        app.dependency_overrides[get_daily_game] = lambda: game
        return game

    try:
        yield _install
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def api(install):
    install()
    return TestClient(app)


def test_root(api):
    assert api.get("/").json() == {"ok": True, "service": "cluele-backend"}


def test_state(api):
    resp = api.get("/game/state")
    assert resp.status_code == 200
    body = resp.json()
    assert body["ready"] is True
    assert body["clue_label"] == "Clue 1: "
    assert body["total_clues"] == 10
    assert body["shown_clues"][0]["text"] == body["clue_text"]


def test_guess_flow(api):
    invalid = api.post("/game/guess", json={"guess": "Atlantis"}).json()
    assert invalid["ok"] is False
    assert invalid["status"] == "invalid"
    assert invalid["game"]["guesses_used"] == 0

    wrong = api.post("/game/guess", json={"guess": "France"}).json()
    assert wrong["ok"] is True
    assert wrong["status"] == "incorrect"
    assert wrong["game"]["clue_number"] == 2

    duplicate = api.post("/game/guess", json={"guess": "france"}).json()
    assert duplicate["status"] == "duplicate"

    won = api.post("/game/guess", json={"guess": "Spain"}).json()
    assert won["status"] == "won"
    assert won["game"]["outcome"] == "win"
    assert won["game"]["guesses_info"] == "You got it in 2 guesses!"

    clues = api.get("/game/clues").json()
    assert clues["available"] is False
    assert len(clues["clues"]) == 2


def test_guess_payload_validation(api):
    assert api.post("/game/guess", json={"guess": "x" * 200}).status_code == 422


def test_validate_and_countries(api):
    assert api.get("/game/validate", params={"name": "japan"}).json() == {"name": "japan", "valid": True}
    assert api.get("/game/validate", params={"name": "Mordor"}).json()["valid"] is False

    assert len(api.get("/game/countries").json()["countries"]) == 12
    assert api.get("/game/countries", params={"prefix": "sw"}).json() == {"countries": ["Sweden"]}
    assert api.get("/game/countries", params={"prefix": "s"}).json() == {"countries": []}


def test_settings_toggles(api):
    body = api.put("/game/settings", json={"name_hint": True}).json()
    assert body["game"]["toggles"]["name_hint"] is True
    assert body["game"]["name_hint"] == "_____"

    assert api.put("/game/settings", json={"infinite_clues": True}).status_code == 403


def test_debug_routes_forbidden_outside_test_mode(api):
    assert api.post("/debug/skip_clue").status_code == 403
    assert api.post("/debug/skip_day").status_code == 403
    assert api.get("/debug/ws_stats").json()["ok"] is True


def test_debug_routes_in_test_mode(api, install):
    game = install(test_mode=True)

    skipped = api.post("/debug/skip_clue").json()
    assert skipped["status"] == "skipped"
    assert skipped["game"]["clue_number"] == 2

    day = api.post("/debug/skip_day").json()
    assert day["game"]["clue_number"] == 1
    assert game.answer_name == "Italy"

    infinite = api.put("/game/settings", json={"infinite_clues": True}).json()
    assert infinite["game"]["total_clues"] > 10


def test_health(api):
    body = api.get("/health").json()
    assert body["ok"] is True
    assert body["clues_ready"] is True
    assert body["missing_datasets"] == []
    assert body["ticker_running"] is False
    assert "spain" not in str(body).lower()


def test_preferences(api, tmp_path):
    store = PreferencesStore(tmp_path / "preferences.json")
    app.dependency_overrides[get_preferences_store] = lambda: store

    assert api.get("/preferences").json() == {"dark_mode": False}
    assert api.put("/preferences", json={"dark_mode": True}).json() == {"dark_mode": True}
    assert api.get("/preferences").json() == {"dark_mode": True}


def test_websocket_state_and_ping(api):
    with api.websocket_connect("/ws") as ws:
        first = ws.receive_json()
        assert first["type"] == "state"
        assert first["payload"]["ready"] is True

        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_text("not json")
        ws.send_json({"type": "hello"})
        assert ws.receive_json() == {"type": "ack", "received": {"type": "hello"}}


def _next_event(ws):
    """Prochain message WS hors ticks du compte à rebours."""
    event = ws.receive_json()
    while event["type"] == "countdown":
        event = ws.receive_json()
    return event


@pytest.fixture
def serve(monkeypatch):
    """App complète (hooks startup / shutdown compris) branchée sur un jeu donné."""
    def _serve(game):
        monkeypatch.setattr(main_module, "get_daily_game", lambda: game)
        app.dependency_overrides[get_daily_game] = lambda: game
        return TestClient(app)

    try:
        yield _serve
    finally:
        app.dependency_overrides.clear()


def test_startup_does_not_wait_for_catalogs(serve, make_game):
    gate = threading.Event()

    def slow_cities():
        gate.wait(5)
        return list(CITIES)

    game = make_game(client=make_client(fetch_cities=Mock(side_effect=slow_cities)))
    try:
        started = time.monotonic()
        with serve(game) as client:
            body = client.get("/health").json()
            assert time.monotonic() - started < 2
            assert body["clues_ready"] is False
            assert "cities" in body["missing_datasets"]
            assert body["ticker_running"] is True
            assert client.get("/game/state").json()["ready"] is False
            assert client.get("/game/validate", params={"name": "france"}).status_code == 200
    finally:
        gate.set()

    # shutdown : chargement et compte à rebours annulés
    assert not game.loading
    assert not game.ticker_running


def test_skip_day_broadcasts_rollover(serve, make_game):
    game = make_game(test_mode=True)
    game.load_catalogs()

    with serve(game) as client:
        with client.websocket_connect("/ws") as ws:
            assert _next_event(ws)["type"] == "state"
            assert client.post("/debug/skip_day").status_code == 200

            event = _next_event(ws)
            assert event["type"] == "rollover"
            assert event["payload"]["guesses_used"] == 0

    assert game.answer_name == "Italy"
