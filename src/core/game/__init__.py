from src.core.game.board import (
    UNOWNED,
    Cell,
    CellEffect,
    CellKey,
    CellType,
    OwnedBy,
    Ownership,
    Unowned,
    load_board,
)
from src.core.game.config import GameConfig
from src.core.game.directions import Heading, TurnChoice
from src.core.game.money import Bank, EventLog, EventType, GameEvent
from src.core.game.player import PlayerState, PlayerStatus
from src.core.game.store import BankUpdate, GameStore, InMemoryStore

__all__ = [
    "UNOWNED",
    "Cell",
    "CellEffect",
    "CellKey",
    "CellType",
    "OwnedBy",
    "Ownership",
    "Unowned",
    "load_board",
    "GameConfig",
    "Heading",
    "TurnChoice",
    "Bank",
    "EventLog",
    "EventType",
    "GameEvent",
    "PlayerState",
    "PlayerStatus",
    "BankUpdate",
    "GameStore",
    "InMemoryStore",
]
