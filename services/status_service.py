"""
狀態服務：由人數推導 Game 狀態

純計算邏輯，不涉及 DB
"""
from models import GameStatus

# 主辦人設定的狀態，自動推導不會覆蓋
STICKY_STATUSES = (GameStatus.LOCKED, GameStatus.CANCELLED)


def derive_status(current_status: GameStatus, joined_count: int, capacity: int) -> GameStatus:
    """
    根據人數推導 Game 狀態

    規則：
    - LOCKED / CANCELLED：原樣返回
    - 其他：joined_count >= capacity → FULL，否則 OPEN

    範例：
        derive_status(OPEN, 10, 10) -> FULL
        derive_status(FULL, 9, 10) -> OPEN
        derive_status(LOCKED, 0, 10) -> LOCKED
    """
    if current_status in STICKY_STATUSES:
        return current_status
    return GameStatus.FULL if joined_count >= capacity else GameStatus.OPEN


def is_sticky(status: GameStatus) -> bool:
    return status in STICKY_STATUSES
