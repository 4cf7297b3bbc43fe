"""
Roster Store：Game / Player / Join 的存取介面

GameManager 只透過這個介面讀寫資料，所以 SQL 與 in-memory 兩種實作
都能直接替換：
- SqlRosterStore：SQLAlchemy Session（正式環境）
- InMemoryRosterStore：dict + undo journal（測試、原型）

所有寫入都在呼叫者的 transaction 內（@transactional 負責 commit / rollback）。
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple
import threading

from fastapi import Depends
from sqlalchemy.orm import Session, joinedload

from database import get_db
from models import Game, Player, Join
from core.locks import with_game_lock
from core.exceptions import GameNotFound, PlayerNotFound


class RosterStore(ABC):
    """Key-value + secondary-index contract over games, players and joins"""

    @abstractmethod
    def get_game(self, game_id: str) -> Game:
        """Raises GameNotFound"""

    @abstractmethod
    def lock_game(self, game_id: str) -> Game:
        """Like get_game, but holds the game until commit/rollback"""

    @abstractmethod
    def put_game(self, game: Game) -> None: ...

    @abstractmethod
    def delete_game(self, game_id: str) -> None:
        """Deletes the game and cascades to its joins"""

    @abstractmethod
    def list_games(self, since: Optional[datetime] = None, public_only: bool = False) -> List[Game]:
        """Games ordered by scheduled time"""

    @abstractmethod
    def insert_player(self, player: Player) -> None: ...

    @abstractmethod
    def list_joins_for_game(self, game_id: str) -> List[Join]:
        """Joins ordered by join timestamp, each with .player loaded"""

    @abstractmethod
    def count_joins_for_game(self, game_id: str) -> int: ...

    @abstractmethod
    def get_join(self, game_id: str, player_id: str) -> Optional[Join]: ...

    @abstractmethod
    def insert_join(self, game_id: str, player_id: str, joined_at: datetime,
                    skill_level: Optional[int] = None) -> Join: ...

    @abstractmethod
    def update_join_skill(self, game_id: str, player_id: str, skill_level: Optional[int]) -> None:
        """Raises PlayerNotFound"""

    @abstractmethod
    def delete_join(self, game_id: str, player_id: str) -> None:
        """Raises PlayerNotFound"""

    @abstractmethod
    def find_join_by_contact(self, game_id: str, phone: str) -> Optional[Join]: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...


class SqlRosterStore(RosterStore):
    def __init__(self, db: Session):
        self.db = db

    def get_game(self, game_id: str) -> Game:
        game = self.db.query(Game).filter(Game.id == game_id).first()
        if not game:
            raise GameNotFound(game_id)
        return game

    def lock_game(self, game_id: str) -> Game:
        game = with_game_lock(game_id, self.db).first()
        if not game:
            raise GameNotFound(game_id)
        return game

    def put_game(self, game: Game) -> None:
        self.db.add(game)
        self.db.flush()

    def delete_game(self, game_id: str) -> None:
        game = self.get_game(game_id)
        # cascade="all, delete-orphan" 會一併刪除 joins
        self.db.delete(game)
        self.db.flush()

    def list_games(self, since: Optional[datetime] = None, public_only: bool = False) -> List[Game]:
        query = self.db.query(Game)
        if since is not None:
            query = query.filter(Game.time >= since)
        if public_only:
            query = query.filter(Game.is_public == True)
        return query.order_by(Game.time).all()

    def insert_player(self, player: Player) -> None:
        self.db.add(player)
        self.db.flush()

    def list_joins_for_game(self, game_id: str) -> List[Join]:
        return (
            self.db.query(Join)
            .options(joinedload(Join.player))
            .filter(Join.game_id == game_id)
            .order_by(Join.joined_at)
            .all()
        )

    def count_joins_for_game(self, game_id: str) -> int:
        return self.db.query(Join).filter(Join.game_id == game_id).count()

    def get_join(self, game_id: str, player_id: str) -> Optional[Join]:
        return self.db.query(Join).filter(
            Join.game_id == game_id,
            Join.player_id == player_id
        ).first()

    def insert_join(self, game_id: str, player_id: str, joined_at: datetime,
                    skill_level: Optional[int] = None) -> Join:
        join = Join(
            game_id=game_id,
            player_id=player_id,
            joined_at=joined_at,
            skill_level=skill_level
        )
        self.db.add(join)
        self.db.flush()
        return join

    def update_join_skill(self, game_id: str, player_id: str, skill_level: Optional[int]) -> None:
        join = self.get_join(game_id, player_id)
        if not join:
            raise PlayerNotFound(player_id)
        join.skill_level = skill_level
        self.db.flush()

    def delete_join(self, game_id: str, player_id: str) -> None:
        join = self.get_join(game_id, player_id)
        if not join:
            raise PlayerNotFound(player_id)
        self.db.delete(join)
        self.db.flush()

    def find_join_by_contact(self, game_id: str, phone: str) -> Optional[Join]:
        return (
            self.db.query(Join)
            .join(Player, Player.id == Join.player_id)
            .filter(Join.game_id == game_id, Player.phone == phone)
            .first()
        )

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()


def _clone(obj):
    """Detached copy of a mapped object's column values"""
    return type(obj)(**{c.key: getattr(obj, c.key) for c in obj.__table__.columns})


class InMemoryRosterStore(RosterStore):
    """
    dict-backed store

    Callers only ever see copies, so an object mutated outside the store is
    not persisted until it is put back. The first lock_game() or write in a
    thread takes a store-wide lock and keeps it until that thread commits or
    rolls back; other threads wait. Each thread keeps its own undo journal,
    which rollback() replays in reverse.
    """

    def __init__(self):
        self.games: Dict[str, Game] = {}
        self.players: Dict[str, Player] = {}
        self.joins: Dict[Tuple[str, str], Join] = {}
        self._lock = threading.RLock()
        self._local = threading.local()

    def get_game(self, game_id: str) -> Game:
        with self._lock:
            game = self.games.get(game_id)
            if game is None:
                raise GameNotFound(game_id)
            return _clone(game)

    def lock_game(self, game_id: str) -> Game:
        self._enter()
        return self.get_game(game_id)

    def put_game(self, game: Game) -> None:
        self._enter()
        previous = self.games.get(game.id)
        self.games[game.id] = _clone(game)
        self._record(self._restorer(self.games, game.id, previous))

    def delete_game(self, game_id: str) -> None:
        self._enter()
        game = self.games.get(game_id)
        if game is None:
            raise GameNotFound(game_id)
        for key in [k for k in self.joins if k[0] == game_id]:
            self._record(self._restorer(self.joins, key, self.joins.pop(key)))
        del self.games[game_id]
        self._record(self._restorer(self.games, game_id, game))

    def list_games(self, since: Optional[datetime] = None, public_only: bool = False) -> List[Game]:
        with self._lock:
            games = [
                g for g in self.games.values()
                if (since is None or g.time >= since) and (not public_only or g.is_public)
            ]
            return [_clone(g) for g in sorted(games, key=lambda g: g.time)]

    def insert_player(self, player: Player) -> None:
        self._enter()
        self.players[player.id] = _clone(player)
        self._record(self._restorer(self.players, player.id, None))

    def list_joins_for_game(self, game_id: str) -> List[Join]:
        with self._lock:
            joins = [j for (gid, _), j in self.joins.items() if gid == game_id]
            return [self._join_view(j) for j in sorted(joins, key=lambda j: j.joined_at)]

    def count_joins_for_game(self, game_id: str) -> int:
        with self._lock:
            return sum(1 for gid, _ in self.joins if gid == game_id)

    def get_join(self, game_id: str, player_id: str) -> Optional[Join]:
        with self._lock:
            join = self.joins.get((game_id, player_id))
            return self._join_view(join) if join is not None else None

    def insert_join(self, game_id: str, player_id: str, joined_at: datetime,
                    skill_level: Optional[int] = None) -> Join:
        self._enter()
        key = (game_id, player_id)
        self.joins[key] = Join(
            game_id=game_id,
            player_id=player_id,
            joined_at=joined_at,
            skill_level=skill_level
        )
        self._record(self._restorer(self.joins, key, None))
        return self._join_view(self.joins[key])

    def update_join_skill(self, game_id: str, player_id: str, skill_level: Optional[int]) -> None:
        self._enter()
        join = self.joins.get((game_id, player_id))
        if join is None:
            raise PlayerNotFound(player_id)
        previous = join.skill_level
        join.skill_level = skill_level
        self._record(lambda: setattr(join, "skill_level", previous))

    def delete_join(self, game_id: str, player_id: str) -> None:
        self._enter()
        key = (game_id, player_id)
        if key not in self.joins:
            raise PlayerNotFound(player_id)
        self._record(self._restorer(self.joins, key, self.joins.pop(key)))

    def find_join_by_contact(self, game_id: str, phone: str) -> Optional[Join]:
        with self._lock:
            for (gid, pid), join in self.joins.items():
                if gid == game_id and self.players[pid].phone == phone:
                    return self._join_view(join)
            return None

    def commit(self) -> None:
        self._journal().clear()
        self._release()

    def rollback(self) -> None:
        undo = self._journal()
        while undo:
            undo.pop()()
        self._release()

    def _join_view(self, join: Join) -> Join:
        view = _clone(join)
        view.player = _clone(self.players[join.player_id])
        return view

    def _journal(self) -> List[Callable[[], None]]:
        if not hasattr(self._local, "undo"):
            self._local.undo = []
        return self._local.undo

    def _record(self, undo: Callable[[], None]) -> None:
        self._journal().append(undo)

    @staticmethod
    def _restorer(table: dict, key, previous) -> Callable[[], None]:
        def restore():
            if previous is None:
                table.pop(key, None)
            else:
                table[key] = previous
        return restore

    def _enter(self) -> None:
        # held until this thread's commit() / rollback()
        if not getattr(self._local, "holding", False):
            self._lock.acquire()
            self._local.holding = True

    def _release(self) -> None:
        if getattr(self._local, "holding", False):
            self._local.holding = False
            self._lock.release()


def get_store(db: Session = Depends(get_db)) -> RosterStore:
    """FastAPI dependency：以 request 的 Session 建立 SqlRosterStore"""
    return SqlRosterStore(db)
