"""
分隊服務：依技能等級把報名玩家分成實力平均的隊伍

Shuffled greedy assignment：
1. 沒有技能等級的玩家視為 3（只在計算時，不寫回 DB）
2. 先均勻洗牌（Fisher-Yates），再依技能「穩定」排序（高 → 低）
   同分玩家的相對順序因此是隨機的，重新分隊會得到不同但同樣平均的結果
3. 依序把玩家放進總分最低的隊伍；同分選人數少的；再同分選編號小的

純計算邏輯，不涉及 DB
"""
import random
from typing import Callable, List, Optional, Sequence, TypeVar

from core.exceptions import InvalidTeamCount, PlayerNotFound

T = TypeVar("T")

DEFAULT_SKILL_LEVEL = 3
MIN_TEAMS = 2


def effective_skill(skill_level: Optional[int]) -> int:
    return DEFAULT_SKILL_LEVEL if skill_level is None else skill_level


def _skill_of(player) -> int:
    return effective_skill(getattr(player, "skill_level", None))


def split_teams(
    players: Sequence[T],
    team_count: int,
    rng: Optional[random.Random] = None,
    skill: Callable[[T], int] = _skill_of
) -> List[List[T]]:
    """
    把玩家分成 team_count 隊

    參數：
        players: 報名玩家（任何帶 skill_level 屬性的物件，或自訂 skill）
        team_count: 隊伍數（>= 2）
        rng: 亂數來源（測試時傳入固定 seed）
        skill: 取得玩家有效技能值的函式

    返回：
        team_count 個 list，順序即為指派順序

    注意：
        - 玩家數少於隊伍數時，部分隊伍會是空的（合法輸出）
        - 不會拒絕任何 >= 2 的 team_count

    異常：
        InvalidTeamCount: team_count < 2
    """
    if team_count < MIN_TEAMS:
        raise InvalidTeamCount(f"Team count must be at least {MIN_TEAMS}, got {team_count}")

    rng = rng or random.Random()

    # 1. 洗牌（random.shuffle 是 Fisher-Yates）
    ordered = list(players)
    rng.shuffle(ordered)

    # 2. 穩定排序：reverse=True 仍保留同分元素的原始（洗牌後）順序
    ordered.sort(key=skill, reverse=True)

    # 3. Greedy 指派
    teams: List[List[T]] = [[] for _ in range(team_count)]
    totals = [0] * team_count

    for player in ordered:
        target = min(range(team_count), key=lambda i: (totals[i], len(teams[i]), i))
        teams[target].append(player)
        totals[target] += skill(player)

    return teams


def team_totals(teams: Sequence[Sequence[T]], skill: Callable[[T], int] = _skill_of) -> List[int]:
    return [sum(skill(p) for p in team) for team in teams]


def move_player(
    teams: Sequence[Sequence[T]],
    player_id: str,
    destination: int,
    key: Callable[[T], str] = lambda p: p.id
) -> List[List[T]]:
    """
    手動調整：把一位玩家移到另一隊

    只做移動（從原隊移除、加到目標隊伍最後），其他玩家不重新分配。
    目標就是原隊伍時不做任何事。

    異常：
        InvalidTeamCount: destination 超出範圍
        PlayerNotFound: 玩家不在任何隊伍中
    """
    if not 0 <= destination < len(teams):
        raise InvalidTeamCount(
            f"Destination team {destination} out of range (0-{len(teams) - 1})"
        )

    moved = [list(team) for team in teams]
    for source, team in enumerate(moved):
        for position, player in enumerate(team):
            if key(player) == player_id:
                if source != destination:
                    moved[destination].append(team.pop(position))
                return moved

    raise PlayerNotFound(player_id)
