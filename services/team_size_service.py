"""
隊伍數服務：沒有指定隊伍數時，從比賽形式推導預設值

規則：
1. sport 裡有「NvN」（例如 5v5、11v11）→ max_players / N 隊
2. 否則依常見隊伍人數 [11, 7, 6, 5, 4, 3] 找第一個能整除 max_players
   且至少分成 2 隊的人數
3. 否則 2 隊

結果一定 >= 2
"""
import re

from services.balance_service import MIN_TEAMS

FORMAT_PATTERN = re.compile(r"(\d+)\s*v\s*\d+", re.IGNORECASE)

# 5v5=10, 6v6=12, 7v7=14, 11v11=22, 3v3=6, 4v4=8
COMMON_TEAM_SIZES = [11, 7, 6, 5, 4, 3]


def players_per_team(sport: str) -> int:
    """回傳 sport 裡「NvN」的 N；找不到（或 N 為 0）回傳 0"""
    match = FORMAT_PATTERN.search(sport or "")
    return int(match.group(1)) if match else 0


def default_team_count(sport: str, capacity: int) -> int:
    """
    範例：
        default_team_count("Basketball 5v5", 10) -> 2
        default_team_count("Soccer", 21) -> 3     # 7 人一隊
        default_team_count("Pickup", 10) -> 2     # 5 人一隊
        default_team_count("Tennis", 2) -> 2
    """
    per_team = players_per_team(sport)
    if per_team > 0:
        return max(MIN_TEAMS, capacity // per_team)

    for size in COMMON_TEAM_SIZES:
        if capacity % size == 0 and capacity // size >= MIN_TEAMS:
            return capacity // size

    return MIN_TEAMS
