"""
HTTP layer: a whole game driven through the endpoints, plus error mapping.
"""

import pytest
from fastapi.testclient import TestClient

from floor.api.main import app


def game_payload(**overrides):
    payload = {
        "rows": 3,
        "cols": 3,
        "players": [
            {"id": "ana", "name": "Ana", "emoji": "😎", "category_id": "history"},
            {"id": "ben", "name": "Ben", "category_id": "movies"},
        ],
        "categories": [
            {"id": "history", "name": "History", "questions": [{"text": "Year of the moon landing?"}, {"text": "First emperor of Rome?"}]},
            {"id": "movies", "name": "Movies", "questions": [{"text": "Who directed Jaws?"}, {"image_url": "stills/1.png"}]},
        ],
        "placements": {"ana": "1-1", "ben": "1-2"},
        "seed": 4,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def create_game(client, **overrides):
    response = client.post("/games", json=game_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["game_id"]


def test_root_and_defaults(client):
    assert client.get("/").json()["message"] == "The Floor API"
    defaults = client.get("/defaults").json()
    assert len(defaults["players"]) == 9
    assert defaults["rows"]["min"] == 3
    assert defaults["rows"]["max"] == 10


def test_create_game_returns_snapshot(client):
    response = client.post("/games", json=game_payload())
    body = response.json()
    state = body["state"]

    assert response.status_code == 201
    assert state["phase"] == "playing"
    assert state["game_id"] == body["game_id"]
    assert len(state["board"]) == 9
    assert {s["player_id"]: s["squares"] for s in state["player_stats"]} == {"ana": 1, "ben": 1}
    assert body["events"][0]["type"] == "game_started"
    assert body["events"][0]["payload"]["placements"] == {"ana": "1-1", "ben": "1-2"}


def test_full_duel_over_http(client):
    game_id = create_game(client)

    drafted = client.post(f"/games/{game_id}/draft").json()
    attacker = drafted["state"]["active_turn"]["player_id"]
    target = drafted["state"]["active_turn"]["available_challenges"][0]

    actions = client.get(f"/games/{game_id}/available-actions").json()
    assert actions["phase"] == "draft"
    assert actions["active_player_id"] == attacker

    duel = client.post(f"/games/{game_id}/challenge", json={"square_id": target, "duel_seconds": 30}).json()
    assert duel["state"]["phase"] == "duel"
    assert duel["state"]["duel"]["player1_time"] == 30

    started = client.post(f"/games/{game_id}/duel/start-clock").json()
    assert started["state"]["duel"]["is_running"] is True

    skipped = client.post(f"/games/{game_id}/duel/skip").json()
    assert skipped["state"]["duel"]["question_index"] == 1

    over = client.post(f"/games/{game_id}/duel/outcome", json={"winner_id": attacker}).json()
    assert over["state"]["phase"] == "game_over"
    assert over["state"]["winner_id"] == attacker

    snapshot = client.get(f"/games/{game_id}").json()
    assert snapshot["state"]["winner_id"] == attacker
    assert any(e["type"] == "game_over" for e in snapshot["recent_events"])


def test_illegal_challenge_error_shape(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/draft")

    response = client.post(f"/games/{game_id}/challenge", json={"square_id": "0-0"})
    assert response.status_code == 400
    assert response.json() == {
        "error": {"code": "not_adjacent", "message": response.json()["error"]["message"]},
    }


def test_wrong_phase_is_conflict(client):
    game_id = create_game(client)
    response = client.post(f"/games/{game_id}/duel/start-clock")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "invalid_transition"


def test_setup_validation_is_422(client):
    response = client.post("/games", json=game_payload(rows=2))
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "validation_error"


def test_unknown_game_is_404(client):
    assert client.get("/games/nope").status_code == 404
    assert client.post("/games/nope/draft").status_code == 404


def test_manual_board_edits(client):
    game_id = create_game(client)

    response = client.post(f"/games/{game_id}/squares/0-0/assign", json={"category_id": "movies", "owner_id": "ana"})
    assert response.status_code == 200
    square = next(s for s in response.json()["state"]["squares"] if s["id"] == "0-0")
    assert square == {"id": "0-0", "row": 0, "col": 0, "owner_id": "ana", "category_id": "movies"}

    response = client.post(f"/games/{game_id}/players/ben/category", json={"category_id": "history"})
    player = next(p for p in response.json()["state"]["players"] if p["id"] == "ben")
    assert player["category_id"] == "history"

    response = client.post(f"/games/{game_id}/players/zed/category", json={"category_id": "history"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "unknown_entity"


def test_cancel_then_end_turn(client):
    game_id = create_game(client)
    drafted = client.post(f"/games/{game_id}/draft").json()
    first = drafted["state"]["active_turn"]["player_id"]
    target = drafted["state"]["active_turn"]["available_challenges"][0]

    client.post(f"/games/{game_id}/challenge", json={"square_id": target})
    cancelled = client.post(f"/games/{game_id}/duel/cancel").json()
    assert cancelled["state"]["phase"] == "draft"
    assert cancelled["state"]["duel"] is None

    ended = client.post(f"/games/{game_id}/end-turn").json()
    assert ended["state"]["phase"] == "draft"
    assert ended["state"]["active_turn"]["player_id"] != first


def test_replay_reset_and_restart(client):
    game_id = create_game(client)
    drafted = client.post(f"/games/{game_id}/draft").json()
    attacker = drafted["state"]["active_turn"]["player_id"]
    target = drafted["state"]["active_turn"]["available_challenges"][0]
    client.post(f"/games/{game_id}/challenge", json={"square_id": target})
    client.post(f"/games/{game_id}/duel/outcome", json={"winner_id": attacker})

    replayed = client.post(f"/games/{game_id}/replay").json()
    assert replayed["state"]["phase"] == "playing"
    owners = {s["id"]: s["owner_id"] for s in replayed["state"]["squares"] if s["owner_id"]}
    assert owners == {"1-1": "ana", "1-2": "ben"}

    reset = client.post(f"/games/{game_id}/reset").json()
    assert reset["state"]["phase"] == "setup"

    restarted = client.post(f"/games/{game_id}/start", json=game_payload(placements=None))
    assert restarted.status_code == 200
    assert restarted.json()["state"]["phase"] == "playing"


def test_continue_after_win_with_three_players(client):
    payload = game_payload(
        players=[
            {"id": "ana", "name": "Ana", "category_id": "history"},
            {"id": "ben", "name": "Ben", "category_id": "movies"},
            {"id": "cy", "name": "Cy", "category_id": "movies"},
        ],
        placements={"ana": "0-0", "ben": "0-1", "cy": "0-2"},
    )
    game_id = client.post("/games", json=payload).json()["game_id"]

    # Whoever is drafted attacks a neighbour; every player touches one
    state = client.post(f"/games/{game_id}/draft").json()["state"]
    attacker = state["active_turn"]["player_id"]
    client.post(f"/games/{game_id}/challenge", json={"square_id": "0-1" if attacker != "ben" else "0-0"})
    result = client.post(f"/games/{game_id}/duel/outcome", json={"winner_id": attacker}).json()
    assert result["state"]["phase"] == "continue"

    actions = client.get(f"/games/{game_id}/available-actions").json()
    assert actions["can_continue"] is True

    continued = client.post(f"/games/{game_id}/continue").json()
    assert continued["state"]["phase"] == "draft"
    assert continued["state"]["active_turn"]["player_id"] == attacker


def test_delete_game(client):
    game_id = create_game(client)
    assert client.delete(f"/games/{game_id}").status_code == 200
    assert client.get(f"/games/{game_id}").status_code == 404
