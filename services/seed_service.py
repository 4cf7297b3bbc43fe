"""
Seed service.

Fills an empty database from a JSON backup on startup:

    {"games": [{"id": ..., "sport": ..., "time": ..., "players": [
        {"id": ..., "name": ..., "phone": ..., "timestamp": ..., "skillLevel": ...}
    ]}]}

Both camelCase (mobile client export) and snake_case keys are accepted.
Records that already exist are skipped.
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging

from models import Game, GameStatus, Player, utcnow
from core.roster_store import RosterStore
from core.exceptions import GameNotFound
from database import transactional

logger = logging.getLogger(__name__)


def _pick(record: Dict[str, Any], *keys, default=None):
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return default


def _parse_time(value: Optional[str]) -> datetime:
    if not value:
        return utcnow()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _game_exists(store: RosterStore, game_id: str) -> bool:
    try:
        store.get_game(game_id)
        return True
    except GameNotFound:
        return False


@transactional
def seed_from_data(store: RosterStore, data: Dict[str, Any]) -> int:
    """
    Insert the backup's games, players and joins in a single transaction.

    Returns the number of games inserted.
    """
    seeded = 0
    known_players = set()

    for record in data.get("games", []):
        if _game_exists(store, record["id"]):
            continue

        game = Game(
            id=record["id"],
            sport=record["sport"],
            time=_parse_time(record.get("time")),
            location=record["location"],
            level=record["level"],
            max_players=_pick(record, "maxPlayers", "max_players"),
            is_public=bool(_pick(record, "isPublic", "is_public", default=False)),
            creator_phone=_pick(record, "creatorPhone", "creator_phone"),
            status=GameStatus(record.get("status") or GameStatus.OPEN.value),
            created_at=_parse_time(_pick(record, "createdAt", "created_at"))
        )
        store.put_game(game)
        seeded += 1

        for entry in record.get("players") or []:
            if entry["id"] not in known_players:
                store.insert_player(Player(
                    id=entry["id"],
                    name=entry["name"],
                    phone=entry.get("phone")
                ))
                known_players.add(entry["id"])
            store.insert_join(
                game.id,
                entry["id"],
                _parse_time(_pick(entry, "timestamp", "joined_at")),
                _pick(entry, "skillLevel", "skill_level")
            )

    return seeded


def seed_from_backup(store: RosterStore, path: Optional[str]) -> int:
    """
    Seed the store when it holds no games and the backup file exists.
    """
    if store.list_games():
        return 0

    if not path or not Path(path).exists():
        logger.info("No backup file found, starting with empty database")
        return 0

    logger.info(f"Seeding database from backup {path}")
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    seeded = seed_from_data(store, data)
    logger.info(f"Seeded {seeded} games from backup")
    return seeded
