"""Shared test fixtures for the land-grid engine tests."""

import random
from typing import Dict, List

import pytest

from src.core.events import Notifier
from src.core.game import (
    Cell,
    CellKey,
    GameConfig,
    Heading,
    InMemoryStore,
    PlayerState,
)


class ScriptedRandom(random.Random):
    """
    Deterministic RNG for tests.

    ``randint`` returns the queued values in order (dice rolls);
    ``randrange`` returns queued picks, or 0 once they run out.
    """

    def __init__(self, rolls=(), picks=()):
        super().__init__(0)
        self.rolls: List[int] = list(rolls)
        self.picks: List[int] = list(picks)

    def randint(self, a, b):
        value = self.rolls.pop(0)
        assert a <= value <= b, f"scripted roll {value} outside [{a}, {b}]"
        return value

    def randrange(self, *args, **kwargs):
        return self.picks.pop(0) if self.picks else 0


class RecordingNotifier(Notifier):
    """Keeps every message per recipient."""

    def __init__(self):
        self.sent: Dict[str, List[str]] = {}

    async def send(self, recipient_id: str, text: str) -> None:
        self.sent.setdefault(recipient_id, []).append(text)


class FailingNotifier(Notifier):
    async def send(self, recipient_id: str, text: str) -> None:
        raise ConnectionError("transport down")


def make_board(size: int = 3, purchase_price: int = 100, land_cost: int = 0) -> List[Cell]:
    """Square board of identical normal cells."""
    return [
        Cell(key=CellKey(x, y), purchase_price=purchase_price, land_cost=land_cost)
        for x in range(1, size + 1)
        for y in range(1, size + 1)
    ]


def make_player(player_id: str = "alice", name: str = None, **overrides) -> PlayerState:
    fields = dict(
        player_id=player_id,
        name=name or player_id.capitalize(),
        position=CellKey(2, 2),
        heading=Heading.NORTH,
        wallet=300,
    )
    fields.update(overrides)
    return PlayerState(**fields)


@pytest.fixture
def game_config():
    """3x3 board, start at (2, 2) facing NORTH with 300 coins, bank 1000."""
    return GameConfig(
        board_size=3,
        initial_wallet_balance=300,
        initial_position=CellKey(2, 2),
        initial_heading=Heading.NORTH,
        initial_bank_balance=1000,
    )


@pytest.fixture
def board():
    return make_board()


@pytest.fixture
def store(board):
    return InMemoryStore(board, bank_balance=1000)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def scripted_rng():
    return ScriptedRandom


@pytest.fixture
def board_factory():
    return make_board


@pytest.fixture
def player_factory():
    return make_player


@pytest.fixture
def failing_notifier():
    return FailingNotifier()
