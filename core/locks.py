"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 PostgreSQL 的 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）。
SQLite 會忽略 FOR UPDATE；改由 database.create_db_engine 在 transaction 開始時
BEGIN IMMEDIATE 取得整個資料庫的寫入鎖。
"""
from sqlalchemy.orm import Session, Query

from models import Game


def with_game_lock(game_id: str, db: Session) -> Query:
    """
    鎖定一個 Game（行級鎖）

    使用場景：
    - 加入遊戲時：兩個並發的 join 不能都看到「還有 1 個空位」
    - 移除玩家、變更狀態時：讀人數 → 推導狀態 → 寫回 必須是一個單位

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise GameNotFound(game_id)
        count = ...
        game.status = derive_status(game.status, count, game.max_players)

    參數：
        game_id: Game id
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)
