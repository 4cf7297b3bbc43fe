"""
服務層

這個 package 包含純計算邏輯，不負責狀態轉換：
- BalanceService：依技能等級分隊
- StatusService：由人數推導 Game 狀態
- TeamSizeService：推導預設隊伍數
- SeedService：從備份匯入資料
"""
