import pytest

from models import GameStatus
from services.status_service import derive_status, is_sticky


@pytest.mark.parametrize("current, count, capacity, expected", [
    (GameStatus.OPEN, 10, 10, GameStatus.FULL),
    (GameStatus.OPEN, 11, 10, GameStatus.FULL),
    (GameStatus.OPEN, 9, 10, GameStatus.OPEN),
    (GameStatus.FULL, 9, 10, GameStatus.OPEN),
    (GameStatus.FULL, 10, 10, GameStatus.FULL),
    (GameStatus.OPEN, 0, 1, GameStatus.OPEN),
    (GameStatus.OPEN, 1, 1, GameStatus.FULL),
])
def test_open_and_full_follow_headcount(current, count, capacity, expected):
    assert derive_status(current, count, capacity) == expected


@pytest.mark.parametrize("count", [0, 5, 10, 12])
def test_locked_is_sticky(count):
    assert derive_status(GameStatus.LOCKED, count, 10) == GameStatus.LOCKED


@pytest.mark.parametrize("count", [0, 5, 10])
def test_cancelled_is_sticky(count):
    assert derive_status(GameStatus.CANCELLED, count, 10) == GameStatus.CANCELLED


def test_is_sticky():
    assert is_sticky(GameStatus.LOCKED)
    assert is_sticky(GameStatus.CANCELLED)
    assert not is_sticky(GameStatus.OPEN)
    assert not is_sticky(GameStatus.FULL)
