"""
SQLAlchemy ORM models：Game / Player / Join

Join 是 Game 與 Player 之間的關聯，帶有 skill_level（1-5 或 NULL）。
Teams are never stored; they only exist as the balancer's output.
"""
from datetime import datetime, timezone
import enum
import uuid

from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, Enum, ForeignKey, CheckConstraint, Index
)
from sqlalchemy.orm import relationship

from database import Base


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC now (all DateTime columns store naive UTC)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class GameStatus(str, enum.Enum):
    """
    Game 狀態

    OPEN / FULL 由人數自動推導；LOCKED / CANCELLED 由主辦人設定，
    自動推導不會覆蓋它們。
    """
    OPEN = "open"
    FULL = "full"
    LOCKED = "locked"
    CANCELLED = "cancelled"


class Game(Base):
    __tablename__ = "games"

    id = Column(String, primary_key=True, default=new_id)
    sport = Column(String, nullable=False)
    time = Column(DateTime, nullable=False)
    location = Column(String, nullable=False)
    level = Column(String, nullable=False)
    max_players = Column(Integer, nullable=False)
    is_public = Column(Boolean, nullable=False, default=False)
    creator_phone = Column(String, nullable=True)
    status = Column(
        Enum(GameStatus, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=GameStatus.OPEN
    )
    created_at = Column(DateTime, nullable=False, default=utcnow)

    joins = relationship(
        "Join",
        back_populates="game",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("max_players >= 1", name="ck_games_max_players_positive"),
        Index("idx_games_time", "time"),
        Index("idx_games_creator_phone", "creator_phone"),
    )


class Player(Base):
    __tablename__ = "players"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)

    joins = relationship("Join", back_populates="player")


class Join(Base):
    __tablename__ = "joins"

    game_id = Column(String, ForeignKey("games.id", ondelete="CASCADE"), primary_key=True)
    player_id = Column(String, ForeignKey("players.id"), primary_key=True)
    joined_at = Column(DateTime, nullable=False, default=utcnow)
    skill_level = Column(Integer, nullable=True)

    game = relationship("Game", back_populates="joins")
    player = relationship("Player", back_populates="joins")

    __table_args__ = (
        CheckConstraint(
            "skill_level IS NULL OR (skill_level >= 1 AND skill_level <= 5)",
            name="ck_joins_skill_level_range"
        ),
        Index("idx_joins_game_joined_at", "game_id", "joined_at"),
    )
