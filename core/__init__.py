"""
核心業務邏輯層

這個 package 包含所有核心業務邏輯，包括：
- GameManager：管理 Game 與報名名單的生命週期
- RosterStore：Game / Player / Join 的存取介面（SQL、in-memory）
- Locks：並發控制工具
- Exceptions：NotFound / Conflict / InvalidInput
"""
