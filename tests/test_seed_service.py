import json

from core.game_manager import GameManager
from models import GameStatus
from services.seed_service import seed_from_backup, seed_from_data

BACKUP = {
    "games": [
        {
            "id": "g1",
            "sport": "Soccer 7v7",
            "time": "2031-05-01T18:00:00.000Z",
            "location": "Field 2",
            "level": "Casual",
            "maxPlayers": 14,
            "isPublic": True,
            "creatorPhone": "5550000000",
            "status": "locked",
            "createdAt": "2031-04-20T10:00:00.000Z",
            "players": [
                {"id": "p1", "name": "Ana", "phone": "5550000001",
                 "timestamp": "2031-04-21T10:00:00.000Z", "skillLevel": 4},
                {"id": "p2", "name": "Ben", "phone": "5550000002",
                 "timestamp": "2031-04-21T11:00:00.000Z", "skillLevel": None},
            ],
        },
        {
            "id": "g2",
            "sport": "Pickup",
            "time": "2031-05-02T18:00:00",
            "location": "Gym",
            "level": "Any",
            "max_players": 4,
            "players": [],
        },
    ]
}


def test_seed_from_data(store):
    assert seed_from_data(store, BACKUP) == 2

    game, joins = GameManager.get_game(store, "g1")
    assert game.status == GameStatus.LOCKED
    assert game.is_public is True
    assert game.time.hour == 18
    assert [j.player.name for j in joins] == ["Ana", "Ben"]
    assert [j.skill_level for j in joins] == [4, None]

    other, _ = GameManager.get_game(store, "g2")
    assert other.status == GameStatus.OPEN
    assert other.is_public is False
    assert other.max_players == 4


def test_seed_skips_existing_games(store):
    seed_from_data(store, BACKUP)
    assert seed_from_data(store, BACKUP) == 0
    assert store.count_joins_for_game("g1") == 2


def test_seed_from_backup_file(memory_store, tmp_path):
    path = tmp_path / "backup.json"
    path.write_text(json.dumps(BACKUP), encoding="utf-8")

    assert seed_from_backup(memory_store, str(path)) == 2
    # store is no longer empty
    assert seed_from_backup(memory_store, str(path)) == 0


def test_seed_without_backup_file(memory_store, tmp_path):
    assert seed_from_backup(memory_store, None) == 0
    assert seed_from_backup(memory_store, str(tmp_path / "missing.json")) == 0
    assert memory_store.list_games() == []
