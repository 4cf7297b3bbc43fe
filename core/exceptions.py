"""
自定義異常類別

集中管理所有業務邏輯異常，方便 API 層統一處理

Three families map to HTTP status codes at the API layer:
NotFound -> 404, Conflict -> 409, InvalidInput -> 400.
"""


class ImInException(Exception):
    """所有遊戲異常的基類"""
    pass


class NotFound(ImInException):
    """Unknown game or player"""
    pass


class Conflict(ImInException):
    """The request is well-formed but clashes with the current roster"""
    pass


class InvalidInput(ImInException):
    """Missing or out-of-range input"""
    pass


# ============ Game 相關異常 ============

class GameNotFound(NotFound):
    """Game 不存在"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__(f"Game {game_id} not found")


class GameFull(Conflict):
    """Game has reached its capacity"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__("Game is full")


class GameLocked(Conflict):
    """Organizer locked the game; joins are rejected"""
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__("Game is locked")


class GameCancelled(Conflict):
    def __init__(self, game_id):
        self.game_id = game_id
        super().__init__("Game is cancelled")


class InvalidStateTransition(Conflict):
    """非法的狀態轉換（cancelled 之後不能再變更）"""
    pass


class InvalidCapacity(InvalidInput):
    """max_players 必須 >= 1"""
    pass


class MissingField(InvalidInput):
    def __init__(self, field):
        self.field = field
        super().__init__(f"Missing required field: {field}")


# ============ Player 相關異常 ============

class PlayerNotFound(NotFound):
    """Player has no join on this game"""
    def __init__(self, player_id):
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found in this game")


class DuplicateContact(Conflict):
    """Phone number already registered for this game"""
    def __init__(self, phone):
        self.phone = phone
        super().__init__("This phone number is already registered for this game")


class InvalidPhone(InvalidInput):
    pass


class InvalidSkillLevel(InvalidInput):
    """Skill level must be between 1 and 5 (or null)"""
    def __init__(self, value):
        self.value = value
        super().__init__(f"Skill level must be between 1 and 5, got {value}")


# ============ Team 相關異常 ============

class InvalidTeamCount(InvalidInput):
    pass


class InvalidTeamSplit(InvalidInput):
    """分隊結果必須剛好包含整份名單，每人一次"""
    pass
