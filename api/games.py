"""
Game API Endpoints

職責：
1. 建立 Game（回傳 join link）
2. 查詢：單一 Game、公開列表（Discover）、我的 Game
3. 修改狀態 / 公開與否 / 基本資料
4. 刪除 Game
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
import logging

from schemas import GameCreate, GameUpdate, GameResponse, DeleteResponse
from core.game_manager import GameManager
from core.roster_store import RosterStore, get_store
from core.exceptions import NotFound, Conflict, InvalidInput
from api.deps import get_base_url

router = APIRouter(prefix="/games", tags=["games"])
logger = logging.getLogger(__name__)


@router.post("", response_model=GameResponse, status_code=201)
def create_game(
    game_data: GameCreate,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    建立 Game（主辦人 endpoint）

    返回：
        Game + join_url（分享給玩家的連結），名單為空
    """
    try:
        game = GameManager.create_game(store, game_data)
        return GameResponse.from_roster(game, [], base_url)

    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("", response_model=List[GameResponse])
def list_public_games(
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    公開 Game 列表（Discover）

    只列出 is_public 且時間還沒過太久的 Game，依時間排序
    """
    try:
        return [
            GameResponse.from_roster(game, joins, base_url)
            for game, joins in GameManager.list_public_games(store)
        ]

    except Exception as e:
        logger.error(f"Failed to list games: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/my/{phone}", response_model=List[GameResponse])
def list_my_games(
    phone: str,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    某支電話建立或加入的 Game

    每筆都帶 is_creator，前端用來顯示主辦人操作
    """
    try:
        return [
            GameResponse.from_roster(game, joins, base_url, is_creator=is_creator)
            for game, joins, is_creator in GameManager.list_games_for_phone(store, phone)
        ]

    except Exception as e:
        logger.error(f"Failed to list games for phone: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{game_id}", response_model=GameResponse)
def get_game(
    game_id: str,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """取得 Game 詳細資料（含名單與人數）"""
    try:
        game, joins = GameManager.get_game(store, game_id)
        return GameResponse.from_roster(game, joins, base_url)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.patch("/{game_id}", response_model=GameResponse)
def update_game(
    game_id: str,
    changes: GameUpdate,
    store: RosterStore = Depends(get_store),
    base_url: str = Depends(get_base_url)
):
    """
    修改 Game（主辦人 endpoint）

    可修改：status、is_public、sport、time、location、level
    CANCELLED 的 Game 不能再改狀態
    """
    try:
        GameManager.update_game(store, game_id, changes)
        game, joins = GameManager.get_game(store, game_id)
        return GameResponse.from_roster(game, joins, base_url)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Conflict as e:
        raise HTTPException(status_code=409, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{game_id}", response_model=DeleteResponse)
def delete_game(game_id: str, store: RosterStore = Depends(get_store)):
    """刪除 Game（連同所有報名）"""
    try:
        GameManager.delete_game(store, game_id)
        return DeleteResponse(success=True)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to delete game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
