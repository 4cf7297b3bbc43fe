"""
HTTP-level tests: routing, status codes and response shapes.
"""
from datetime import timedelta

import pytest

from models import utcnow


def game_payload(**overrides):
    payload = {
        "sport": "Basketball 5v5",
        "time": (utcnow() + timedelta(days=1)).isoformat(),
        "location": "Rucker Park",
        "level": "Intermediate",
        "max_players": 10,
        "is_public": True,
        "creator_phone": "5550000000",
    }
    payload.update(overrides)
    return payload


def create_game(client, **overrides):
    response = client.post("/games", json=game_payload(**overrides))
    assert response.status_code == 201
    return response.json()


def join(client, game_id, n, name=None):
    return client.post(
        f"/games/{game_id}/join",
        json={"name": name or f"Player {n}", "phone": f"555{n:07d}"}
    )


@pytest.fixture
def game(client):
    return create_game(client)


# ============================================================================
# System
# ============================================================================

def test_root_and_health(client):
    assert client.get("/").json()["status"] == "ok"

    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["status"] == "ok"
    assert "timestamp" in health.json()


# ============================================================================
# Games
# ============================================================================

def test_create_game_returns_join_url(client):
    body = create_game(client)

    assert body["status"] == "open"
    assert body["player_count"] == 0
    assert body["players"] == []
    assert body["join_url"] == f"http://testserver/join/{body['id']}"


def test_create_game_missing_field(client):
    payload = game_payload()
    del payload["location"]
    assert client.post("/games", json=payload).status_code == 422


def test_create_game_blank_field(client):
    response = client.post("/games", json=game_payload(sport="   "))
    assert response.status_code == 400
    assert "sport" in response.json()["detail"]


def test_create_game_zero_capacity(client):
    assert client.post("/games", json=game_payload(max_players=0)).status_code == 400


def test_get_game(client, game):
    body = client.get(f"/games/{game['id']}").json()
    assert body["id"] == game["id"]
    assert body["location"] == "Rucker Park"


def test_get_unknown_game(client):
    response = client.get("/games/missing")
    assert response.status_code == 404
    assert response.json()["detail"] == "Game not found"


def test_list_public_games(client):
    later = create_game(client, time=(utcnow() + timedelta(days=2)).isoformat())
    sooner = create_game(client)
    create_game(client, is_public=False)
    create_game(client, time=(utcnow() - timedelta(days=1)).isoformat())

    ids = [g["id"] for g in client.get("/games").json()]

    assert ids == [sooner["id"], later["id"]]


def test_list_my_games(client):
    mine = create_game(client, creator_phone="5551112222")
    other = create_game(client, creator_phone="5553334444")
    create_game(client, creator_phone="5553334444")
    join(client, other["id"], 1112222)

    body = client.get("/games/my/5551112222").json()

    assert [(g["id"], g["is_creator"]) for g in body] == [
        (mine["id"], True),
        (other["id"], False),
    ]


def test_patch_status_and_visibility(client, game):
    response = client.patch(f"/games/{game['id']}", json={"status": "locked", "is_public": False})

    assert response.status_code == 200
    assert response.json()["status"] == "locked"
    assert response.json()["is_public"] is False


def test_patch_rejects_unknown_status(client, game):
    assert client.patch(f"/games/{game['id']}", json={"status": "paused"}).status_code == 422


def test_patch_cancelled_game_is_conflict(client, game):
    client.patch(f"/games/{game['id']}", json={"status": "cancelled"})
    response = client.patch(f"/games/{game['id']}", json={"status": "open"})
    assert response.status_code == 409


def test_patch_unknown_game(client):
    assert client.patch("/games/missing", json={"is_public": True}).status_code == 404


def test_delete_game(client, game):
    join(client, game["id"], 1)

    assert client.delete(f"/games/{game['id']}").json() == {"success": True}
    assert client.get(f"/games/{game['id']}").status_code == 404
    assert client.delete(f"/games/{game['id']}").status_code == 404


# ============================================================================
# Players
# ============================================================================

def test_join_game(client, game):
    response = join(client, game["id"], 1, name="Jordan")

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "You're in! 1/10 players joined."
    assert body["game"]["player_count"] == 1
    player = body["game"]["players"][0]
    assert player["name"] == "Jordan"
    assert player["skill_level"] is None


def test_join_duplicate_phone(client, game):
    join(client, game["id"], 1)
    response = join(client, game["id"], 1, name="Someone else")

    assert response.status_code == 409
    assert client.get(f"/games/{game['id']}").json()["player_count"] == 1


def test_join_until_full(client):
    game = create_game(client, max_players=2)
    join(client, game["id"], 1)
    body = join(client, game["id"], 2).json()

    assert body["game"]["status"] == "full"
    response = join(client, game["id"], 3)
    assert response.status_code == 409
    assert response.json()["detail"] == "Game is full"


def test_join_locked_game(client, game):
    client.patch(f"/games/{game['id']}", json={"status": "locked"})
    response = join(client, game["id"], 1)
    assert response.status_code == 409
    assert response.json()["detail"] == "Game is locked"


def test_join_unknown_game(client):
    assert join(client, "missing", 1).status_code == 404


def test_join_invalid_phone(client, game):
    response = client.post(f"/games/{game['id']}/join", json={"name": "Jo", "phone": "123"})
    assert response.status_code == 400


def test_join_missing_phone(client, game):
    response = client.post(f"/games/{game['id']}/join", json={"name": "Jo"})
    assert response.status_code == 400


def test_update_skill_level(client, game):
    player_id = join(client, game["id"], 1).json()["game"]["players"][0]["id"]

    response = client.patch(f"/games/{game['id']}/players/{player_id}", json={"skill_level": 5})
    assert response.status_code == 200
    assert response.json()["players"][0]["skill_level"] == 5

    response = client.patch(f"/games/{game['id']}/players/{player_id}", json={"skill_level": None})
    assert response.json()["players"][0]["skill_level"] is None


def test_update_skill_level_out_of_range(client, game):
    player_id = join(client, game["id"], 1).json()["game"]["players"][0]["id"]
    response = client.patch(f"/games/{game['id']}/players/{player_id}", json={"skill_level": 7})
    assert response.status_code == 400


def test_update_skill_level_unknown_player(client, game):
    response = client.patch(f"/games/{game['id']}/players/nobody", json={"skill_level": 3})
    assert response.status_code == 404


def test_remove_player_reopens_game(client):
    game = create_game(client, max_players=1)
    player_id = join(client, game["id"], 1).json()["game"]["players"][0]["id"]

    response = client.delete(f"/games/{game['id']}/players/{player_id}")

    assert response.status_code == 200
    assert response.json()["game"]["status"] == "open"
    assert response.json()["game"]["player_count"] == 0
    assert client.delete(f"/games/{game['id']}/players/{player_id}").status_code == 404


# ============================================================================
# Teams
# ============================================================================

def test_split_teams(client):
    game = create_game(client, max_players=6, sport="Volleyball 3v3")
    for n, level in enumerate([5, 4, 3, 3, 2, 1]):
        player_id = join(client, game["id"], n).json()["game"]["players"][-1]["id"]
        client.patch(f"/games/{game['id']}/players/{player_id}", json={"skill_level": level})

    response = client.post(f"/games/{game['id']}/teams", json={})

    assert response.status_code == 200
    body = response.json()
    assert body["team_count"] == 2
    assert sum(len(team) for team in body["teams"]) == 6
    assert abs(body["totals"][0] - body["totals"][1]) <= 1
    assert body["unassigned_count"] == 0


def test_split_teams_counts_unassigned(client, game):
    for n in range(4):
        join(client, game["id"], n)

    body = client.post(f"/games/{game['id']}/teams", json={"team_count": 2}).json()

    assert body["totals"] == [6, 6]
    assert body["unassigned_count"] == 4


def test_split_teams_invalid_count(client, game):
    assert client.post(f"/games/{game['id']}/teams", json={"team_count": 1}).status_code == 400


def test_split_teams_unknown_game(client):
    assert client.post("/games/missing/teams", json={}).status_code == 404


def test_move_player_between_teams(client, game):
    ids = [join(client, game["id"], n).json()["game"]["players"][-1]["id"] for n in range(3)]

    response = client.post(
        f"/games/{game['id']}/teams/move",
        json={"teams": [[ids[0], ids[1]], [ids[2]]], "player_id": ids[0], "destination": 1}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["teams"] == [[ids[1]], [ids[2], ids[0]]]
    assert body["totals"] == [3, 6]


def test_move_player_bad_destination(client, game):
    ids = [join(client, game["id"], n).json()["game"]["players"][-1]["id"] for n in range(2)]
    response = client.post(
        f"/games/{game['id']}/teams/move",
        json={"teams": [[ids[0]], [ids[1]]], "player_id": ids[0], "destination": 5}
    )
    assert response.status_code == 400


def test_move_player_with_inconsistent_teams(client, game):
    ids = [join(client, game["id"], n).json()["game"]["players"][-1]["id"] for n in range(3)]

    duplicated = client.post(
        f"/games/{game['id']}/teams/move",
        json={"teams": [[ids[0], ids[1], ids[2]], [ids[0]]], "player_id": ids[1], "destination": 1}
    )
    incomplete = client.post(
        f"/games/{game['id']}/teams/move",
        json={"teams": [[ids[0]], [ids[1]]], "player_id": ids[0], "destination": 1}
    )

    assert duplicated.status_code == 400
    assert incomplete.status_code == 400
