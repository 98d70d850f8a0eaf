import pytest
from fastapi.testclient import TestClient

from server.play_service import ServiceSettings, create_app


@pytest.fixture
def client():
    return TestClient(create_app(ServiceSettings(log_level="WARNING", default_seed=17)))


def create_game(client, players=("alice", "bob")):
    response = client.post("/games", json={"player_ids": list(players)})
    assert response.status_code == 200
    return response.json()["game_id"]


def test_create_and_start_round(client):
    game_id = create_game(client)

    response = client.post(f"/games/{game_id}/round", json={})

    assert response.status_code == 200
    body = response.json()
    assert body["accepted"]
    assert body["state"]["round_number"] == 1
    assert body["state"]["players"][0]["hand_size"] == 26


def test_duplicate_players_are_rejected(client):
    response = client.post("/games", json={"player_ids": ["a", "a"]})

    assert response.status_code == 400


def test_missing_game_returns_recovery_action(client):
    response = client.get("/games/nope")

    assert response.status_code == 404
    assert response.json()["action"] == "Return to the game list."


def test_unknown_player_is_a_bad_request(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/round", json={})

    response = client.get(f"/games/{game_id}", params={"perspective": "mallory"})

    assert response.status_code == 400


def test_play_and_rejection_payloads(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/round", json={"seed": 3})
    hand = client.get(f"/games/{game_id}", params={"perspective": "alice"}).json()["players"][0]["hand"]

    played = client.post(f"/games/{game_id}/play", json={"player_id": "alice", "card_id": hand[0]["id"]})
    assert played.json()["accepted"]
    assert len(played.json()["state"]["trick"]) == 1

    again = client.post(f"/games/{game_id}/play", json={"player_id": "alice", "card_id": hand[0]["id"]})
    assert again.status_code == 200
    assert not again.json()["accepted"]
    assert again.json()["reason"] == "Card is not in hand."

    resolved = client.post(f"/games/{game_id}/resolve-trick")
    assert resolved.json()["winner_id"] == "alice"


def test_bid_declare_and_settle(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/round", json={})
    hand = client.get(f"/games/{game_id}", params={"perspective": "bob"}).json()["players"][1]["hand"]

    bid = client.post(f"/games/{game_id}/bid", json={"player_id": "bob", "card_ids": [hand[0]["id"]]})
    assert bid.json()["accepted"]

    declared = client.post(f"/games/{game_id}/declare", json={"player_id": "bob", "kind": "marriage"})
    assert declared.json()["accepted"]

    settled = client.post(f"/games/{game_id}/settle")
    assert settled.json()["accepted"]
    assert settled.json()["state"]["scores"]["bob"] >= 20


def test_sync_applies_remote_state(client):
    game_id = create_game(client)
    client.post(f"/games/{game_id}/round", json={})
    remote = client.get(f"/games/{game_id}/state").json()
    remote["version"] = 40

    response = client.post(f"/games/{game_id}/sync", json={"state": remote})

    assert response.json()["accepted"]
    assert response.json()["state"]["version"] == 40


def test_sync_rejects_bad_payload(client):
    game_id = create_game(client)

    response = client.post(f"/games/{game_id}/sync", json={"state": {"player_ids": "alice"}})

    assert response.status_code == 200
    assert not response.json()["accepted"]


def test_delete_game(client):
    game_id = create_game(client)

    assert client.delete(f"/games/{game_id}").json() == {"deleted": game_id}
    assert client.get(f"/games/{game_id}").status_code == 404


def test_hands_stay_hidden_without_perspective(client):
    game_id = create_game(client)
    started = client.post(f"/games/{game_id}/round", json={}).json()

    public = client.get(f"/games/{game_id}").json()

    for view in (started["state"], public):
        assert all(player["hand"] is None for player in view["players"])
        assert all(player["hand_size"] == 26 for player in view["players"])
