"""
Request / Response schemas（Pydantic）
"""
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from models import Game, GameStatus, Join


# ============ Game ============

class GameCreate(BaseModel):
    sport: str
    time: datetime
    location: str
    level: str
    max_players: int
    is_public: bool = False
    creator_phone: Optional[str] = None


class GameUpdate(BaseModel):
    """所有欄位皆可省略；max_players 建立後不可修改"""
    status: Optional[GameStatus] = None
    is_public: Optional[bool] = None
    sport: Optional[str] = None
    time: Optional[datetime] = None
    location: Optional[str] = None
    level: Optional[str] = None


class PlayerResponse(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None
    timestamp: datetime
    skill_level: Optional[int] = None

    @classmethod
    def from_join(cls, join: Join) -> "PlayerResponse":
        return cls(
            id=join.player_id,
            name=join.player.name,
            phone=join.player.phone,
            timestamp=join.joined_at,
            skill_level=join.skill_level
        )


class GameResponse(BaseModel):
    id: str
    sport: str
    time: datetime
    location: str
    level: str
    max_players: int
    is_public: bool
    creator_phone: Optional[str] = None
    status: GameStatus
    created_at: datetime
    join_url: str
    players: List[PlayerResponse] = []
    player_count: int = 0
    is_creator: Optional[bool] = None

    @classmethod
    def from_roster(
        cls,
        game: Game,
        joins: Sequence[Join],
        base_url: str,
        is_creator: Optional[bool] = None
    ) -> "GameResponse":
        players = [PlayerResponse.from_join(j) for j in joins]
        return cls(
            id=game.id,
            sport=game.sport,
            time=game.time,
            location=game.location,
            level=game.level,
            max_players=game.max_players,
            is_public=bool(game.is_public),
            creator_phone=game.creator_phone,
            status=game.status,
            created_at=game.created_at,
            join_url=f"{base_url.rstrip('/')}/join/{game.id}",
            players=players,
            player_count=len(players),
            is_creator=is_creator
        )


class DeleteResponse(BaseModel):
    success: bool = True


# ============ Player ============

class PlayerJoin(BaseModel):
    name: str
    phone: Optional[str] = None


class SkillUpdate(BaseModel):
    """skill_level 必填但可為 null（null = 清除等級）"""
    skill_level: Optional[int]


class RosterChangeResponse(BaseModel):
    success: bool = True
    message: str
    game: GameResponse


# ============ Teams ============

class TeamSplitRequest(BaseModel):
    team_count: Optional[int] = None


class TeamMoveRequest(BaseModel):
    teams: List[List[str]]
    player_id: str
    destination: int = Field(..., ge=0)


class TeamSplitResponse(BaseModel):
    team_count: int
    teams: List[List[str]]
    totals: List[int]
    unassigned_count: int = 0
