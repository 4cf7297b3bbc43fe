"""
Player API Endpoints

職責：
1. 玩家透過分享連結加入 Game
2. 主辦人設定玩家技能等級
3. 移除玩家（玩家自行退出或主辦人移除）
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from schemas import PlayerJoin, SkillUpdate, GameResponse, RosterChangeResponse
from core.game_manager import GameManager
from core.roster_store import RosterStore, get_store
from core.exceptions import NotFound, Conflict, InvalidInput
from api.deps import get_base_url

router = APIRouter(prefix="/games", tags=["players"])
logger = logging.getLogger(__name__)


@router.post("/{game_id}/join", response_model=RosterChangeResponse, status_code=201)
def join_game(
    game_id: str,
    player_data: PlayerJoin,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    加入 Game（玩家 endpoint）

    前置條件：
    - Game 必須存在，且不是 LOCKED / CANCELLED
    - 同一支電話只能報名一次
    - 人數未滿

    流程：
    1. GameManager.join_game（鎖定 Game → 檢查 → 建立 Player + Join → 推導狀態）
    2. 返回最新的 Game 與名單
    """
    try:
        # 1. 加入
        GameManager.join_game(store, game_id, player_data.name, player_data.phone)

        # 2. 取得最新名單
        game, joins = GameManager.get_game(store, game_id)

        return RosterChangeResponse(
            success=True,
            message=f"You're in! {len(joins)}/{game.max_players} players joined.",
            game=GameResponse.from_roster(game, joins, base_url)
        )

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Conflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to join game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.patch("/{game_id}/players/{player_id}", response_model=GameResponse)
def update_player_skill(
    game_id: str,
    player_id: str,
    skill_data: SkillUpdate,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    設定玩家技能等級（主辦人 endpoint）

    skill_level 為 1-5，或 null 清除等級
    """
    try:
        GameManager.update_skill_level(store, game_id, player_id, skill_data.skill_level)
        game, joins = GameManager.get_game(store, game_id)
        return GameResponse.from_roster(game, joins, base_url)

    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update player skill: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{game_id}/players/{player_id}", response_model=RosterChangeResponse)
def remove_player(
    game_id: str,
    player_id: str,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    移除玩家

    移除後重新推導狀態：FULL 可能回到 OPEN，LOCKED / CANCELLED 不變
    """
    try:
        GameManager.remove_player(store, game_id, player_id)
        game, joins = GameManager.get_game(store, game_id)

        return RosterChangeResponse(
            success=True,
            message="You have been removed from this game",
            game=GameResponse.from_roster(game, joins, base_url)
        )

    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to remove player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
