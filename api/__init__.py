"""
API 層

FastAPI routers：只負責 HTTP 轉換，業務邏輯都在 core.GameManager
- games：建立、查詢、修改、刪除 Game
- players：加入、技能等級、移除玩家
- teams：分隊與手動調整
"""
