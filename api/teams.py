"""
Team API Endpoints

分隊結果不存 DB：每次呼叫都重新洗牌分隊（Reshuffle），
手動調整則由前端帶著目前的分隊結果呼叫 /teams/move。
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
import logging

from models import Join
from schemas import TeamSplitRequest, TeamMoveRequest, TeamSplitResponse
from core.game_manager import GameManager
from core.roster_store import RosterStore, get_store
from core.exceptions import NotFound, InvalidInput
from services.balance_service import team_totals

router = APIRouter(prefix="/games", tags=["teams"])
logger = logging.getLogger(__name__)


def _team_response(teams: List[List[Join]], roster: List[Join]) -> TeamSplitResponse:
    return TeamSplitResponse(
        team_count=len(teams),
        teams=[[j.player_id for j in team] for team in teams],
        totals=team_totals(teams),
        unassigned_count=sum(1 for j in roster if j.skill_level is None)
    )


@router.post("/{game_id}/teams", response_model=TeamSplitResponse)
def split_teams(
    game_id: str,
    split_data: TeamSplitRequest,
    store: RosterStore = Depends(get_store)
):
    """
    分隊（主辦人 endpoint）

    參數：
        team_count: 隊伍數（省略時由 sport / max_players 推導）

    返回：
        - teams: 每隊的 player id
        - totals: 每隊技能總分
        - unassigned_count: 沒有技能等級、以 3 計算的玩家數
    """
    try:
        teams, roster = GameManager.split_teams(store, game_id, split_data.team_count)
        return _team_response(teams, roster)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to split teams: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{game_id}/teams/move", response_model=TeamSplitResponse)
def move_team_player(
    game_id: str,
    move_data: TeamMoveRequest,
    store: RosterStore = Depends(get_store)
):
    """
    手動調整：把一位玩家移到另一隊

    其他玩家維持原隊伍，不重新分隊
    """
    try:
        teams, roster = GameManager.move_team_player(
            store,
            game_id,
            move_data.teams,
            move_data.player_id,
            move_data.destination
        )
        return _team_response(teams, roster)

    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInput as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to move player: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
