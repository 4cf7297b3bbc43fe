"""
Game Manager：管理 Game 與報名名單（Roster）的完整生命週期

職責：
1. 建立 / 修改 / 刪除 Game
2. 玩家加入、移除、設定技能等級
3. 每次名單變動後重新推導狀態（open / full）
4. 分隊（呼叫 balance_service）

原則：
- 所有寫入都經過 @transactional：讀人數 → 推導狀態 → 寫回 是同一個 transaction
- 加入前先鎖定 Game，避免兩個並發的 join 都搶到最後一個空位
- 只透過 RosterStore 存取資料
"""
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple
import logging
import random
import re

from models import Game, GameStatus, Join, Player, new_id, utcnow
from schemas import GameCreate, GameUpdate
from core.roster_store import RosterStore
from core.exceptions import (
    DuplicateContact,
    GameCancelled,
    GameFull,
    GameLocked,
    InvalidCapacity,
    InvalidPhone,
    InvalidSkillLevel,
    InvalidStateTransition,
    InvalidTeamSplit,
    MissingField,
    PlayerNotFound
)
from services import balance_service
from services.status_service import derive_status, is_sticky
from services.team_size_service import default_team_count
from database import get_settings, transactional

logger = logging.getLogger(__name__)

PHONE_DIGITS = 10
MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 5


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise MissingField(field)
    return value.strip()


def _validate_phone(phone: str) -> None:
    if len(re.sub(r"\D", "", phone)) != PHONE_DIGITS:
        raise InvalidPhone(f"Phone number must be exactly {PHONE_DIGITS} digits")


def _to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _discover_since(now: Optional[datetime]) -> datetime:
    return (now or utcnow()) - timedelta(hours=get_settings().discover_window_hours)


class GameManager:
    """Game 生命週期管理器"""

    @staticmethod
    @transactional
    def create_game(store: RosterStore, data: GameCreate) -> Game:
        """
        建立新 Game

        驗證：
        - sport / location / level 不可為空白
        - max_players >= 1

        異常：
            MissingField, InvalidCapacity
        """
        sport = _require_text(data.sport, "sport")
        location = _require_text(data.location, "location")
        level = _require_text(data.level, "level")

        if data.max_players < 1:
            raise InvalidCapacity(f"max_players must be at least 1, got {data.max_players}")

        game = Game(
            id=new_id(),
            sport=sport,
            time=_to_utc_naive(data.time),
            location=location,
            level=level,
            max_players=data.max_players,
            is_public=data.is_public,
            creator_phone=(data.creator_phone or "").strip() or None,
            status=GameStatus.OPEN,
            created_at=utcnow()
        )
        store.put_game(game)

        logger.info(f"Created game {game.id} ({sport}, max {data.max_players})")
        return game

    @staticmethod
    def get_game(store: RosterStore, game_id: str) -> Tuple[Game, List[Join]]:
        """
        取得 Game 與名單（依加入時間排序）

        異常：
            GameNotFound
        """
        game = store.get_game(game_id)
        return game, store.list_joins_for_game(game_id)

    @staticmethod
    def list_public_games(
        store: RosterStore,
        now: Optional[datetime] = None
    ) -> List[Tuple[Game, List[Join]]]:
        """公開且尚未過期（時間 >= now - discover window）的 Game，依時間排序"""
        games = store.list_games(since=_discover_since(now), public_only=True)
        return [(game, store.list_joins_for_game(game.id)) for game in games]

    @staticmethod
    def list_games_for_phone(
        store: RosterStore,
        phone: str,
        now: Optional[datetime] = None
    ) -> List[Tuple[Game, List[Join], bool]]:
        """
        某支電話建立或加入的 Game

        返回：
            (Game, 名單, is_creator) 的 list，依時間排序
        """
        phone = phone.strip()
        result = []
        for game in store.list_games(since=_discover_since(now)):
            joins = store.list_joins_for_game(game.id)
            is_creator = game.creator_phone == phone
            is_player = any(j.player.phone == phone for j in joins)
            if is_creator or is_player:
                result.append((game, joins, is_creator))
        return result

    @staticmethod
    @transactional
    def update_game(store: RosterStore, game_id: str, changes: GameUpdate) -> Game:
        """
        修改 Game（狀態、公開與否、基本資料）

        狀態規則：
        - CANCELLED 之後不能再改成其他狀態
        - LOCKED / CANCELLED：直接寫入
        - OPEN / FULL：依人數重新推導（解鎖一個已滿的 Game 會回到 FULL）

        異常：
            GameNotFound, InvalidStateTransition, MissingField
        """
        game = store.lock_game(game_id)

        for field in ("sport", "location", "level"):
            value = getattr(changes, field)
            if value is not None:
                setattr(game, field, _require_text(value, field))

        if changes.time is not None:
            game.time = _to_utc_naive(changes.time)

        if changes.is_public is not None:
            game.is_public = changes.is_public

        if changes.status is not None and changes.status != game.status:
            if game.status == GameStatus.CANCELLED:
                raise InvalidStateTransition(
                    f"Game {game_id} is cancelled and cannot become {changes.status.value}"
                )

            previous = game.status
            if is_sticky(changes.status):
                game.status = changes.status
            else:
                count = store.count_joins_for_game(game_id)
                game.status = derive_status(GameStatus.OPEN, count, game.max_players)

            logger.info(
                f"Game {game_id} status {previous.value} -> {game.status.value} (organizer)"
            )

        store.put_game(game)
        return game

    @staticmethod
    @transactional
    def delete_game(store: RosterStore, game_id: str) -> None:
        """刪除 Game（連同所有 Join）"""
        store.delete_game(game_id)
        logger.info(f"Deleted game {game_id}")

    @staticmethod
    @transactional
    def join_game(
        store: RosterStore,
        game_id: str,
        name: Optional[str],
        phone: Optional[str]
    ) -> Tuple[Game, Player]:
        """
        玩家加入 Game

        流程：
        1. 驗證 name / phone
        2. 鎖定 Game
        3. 檢查狀態、電話是否重複、是否已滿
        4. 建立 Player + Join（skill_level = NULL）
        5. 重新推導狀態

        異常：
            MissingField, InvalidPhone: 輸入不合法
            GameNotFound: Game 不存在
            GameLocked, GameCancelled: 主辦人已鎖定 / 取消
            DuplicateContact: 同一支電話已經報名
            GameFull: 人數已滿
        """
        # 1. 驗證輸入
        name = _require_text(name, "name")
        phone = _require_text(phone, "phone")
        _validate_phone(phone)

        # 2. 取得並鎖定 Game
        game = store.lock_game(game_id)

        # 3. 檢查
        if game.status == GameStatus.LOCKED:
            raise GameLocked(game_id)
        if game.status == GameStatus.CANCELLED:
            raise GameCancelled(game_id)

        if store.find_join_by_contact(game_id, phone):
            raise DuplicateContact(phone)

        if store.count_joins_for_game(game_id) >= game.max_players:
            raise GameFull(game_id)

        # 4. 建立 Player + Join
        player = Player(id=new_id(), name=name, phone=phone)
        store.insert_player(player)
        store.insert_join(game_id, player.id, utcnow(), None)

        logger.info(f"Player {player.id} ({name}) joined game {game_id}")

        # 5. 重新推導狀態
        GameManager.refresh_status(store, game)
        return game, player

    @staticmethod
    @transactional
    def update_skill_level(
        store: RosterStore,
        game_id: str,
        player_id: str,
        skill_level: Optional[int]
    ) -> None:
        """
        設定玩家技能等級（1-5），None 代表清除

        異常：
            GameNotFound, PlayerNotFound, InvalidSkillLevel
        """
        store.lock_game(game_id)

        if store.get_join(game_id, player_id) is None:
            raise PlayerNotFound(player_id)

        if skill_level is not None and not MIN_SKILL_LEVEL <= skill_level <= MAX_SKILL_LEVEL:
            raise InvalidSkillLevel(skill_level)

        store.update_join_skill(game_id, player_id, skill_level)
        logger.info(f"Player {player_id} skill level in game {game_id} set to {skill_level}")

    @staticmethod
    @transactional
    def remove_player(store: RosterStore, game_id: str, player_id: str) -> Game:
        """
        從 Game 移除玩家，並重新推導狀態

        FULL 可能因此回到 OPEN；LOCKED / CANCELLED 不變

        異常：
            GameNotFound, PlayerNotFound
        """
        game = store.lock_game(game_id)
        store.delete_join(game_id, player_id)

        logger.info(f"Player {player_id} removed from game {game_id}")

        GameManager.refresh_status(store, game)
        return game

    @staticmethod
    def refresh_status(store: RosterStore, game: Game) -> Game:
        """
        依目前人數重新推導狀態並寫回

        注意：
            - 不自己 commit，必須在呼叫者的 transaction 內
        """
        count = store.count_joins_for_game(game.id)
        new_status = derive_status(game.status, count, game.max_players)

        if new_status != game.status:
            logger.info(
                f"Game {game.id} status {game.status.value} -> {new_status.value} "
                f"({count}/{game.max_players} players)"
            )
            game.status = new_status
            store.put_game(game)

        return game

    @staticmethod
    def split_teams(
        store: RosterStore,
        game_id: str,
        team_count: Optional[int] = None,
        rng: Optional[random.Random] = None
    ) -> Tuple[List[List[Join]], List[Join]]:
        """
        把名單分隊

        參數：
            team_count: 隊伍數；省略時由 sport / max_players 推導

        返回：
            (teams, 名單)

        異常：
            GameNotFound, InvalidTeamCount
        """
        game = store.get_game(game_id)
        joins = store.list_joins_for_game(game_id)

        if team_count is None:
            team_count = default_team_count(game.sport, game.max_players)

        teams = balance_service.split_teams(joins, team_count, rng)

        logger.info(
            f"Split {len(joins)} players of game {game_id} into {team_count} teams: "
            f"totals {balance_service.team_totals(teams)}"
        )
        return teams, joins

    @staticmethod
    def move_team_player(
        store: RosterStore,
        game_id: str,
        teams: List[List[str]],
        player_id: str,
        destination: int
    ) -> Tuple[List[List[Join]], List[Join]]:
        """
        手動把一位玩家移到另一隊（不重新分隊）

        參數：
            teams: 目前的分隊結果（player id）

        異常：
            GameNotFound, PlayerNotFound, InvalidTeamSplit, InvalidTeamCount
        """
        store.get_game(game_id)
        joins = store.list_joins_for_game(game_id)
        roster = {j.player_id: j for j in joins}

        seen = set()
        join_teams = []
        for team in teams:
            for pid in team:
                if pid not in roster:
                    raise PlayerNotFound(pid)
                if pid in seen:
                    raise InvalidTeamSplit(f"Player {pid} appears more than once")
                seen.add(pid)
            join_teams.append([roster[pid] for pid in team])

        missing = [pid for pid in roster if pid not in seen]
        if missing:
            raise InvalidTeamSplit(f"Teams are missing players: {', '.join(missing)}")

        moved = balance_service.move_player(
            join_teams, player_id, destination, key=lambda j: j.player_id
        )
        return moved, joins
