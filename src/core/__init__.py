"""
Core domain layer for the land-grid game.

Exposes game engine primitives and the persistence interface.
"""

from src.core.game import (
    Cell,
    CellKey,
    GameConfig,
    GameStore,
    Heading,
    InMemoryStore,
    PlayerState,
    load_board,
)

__all__ = [
    "Cell",
    "CellKey",
    "GameConfig",
    "GameStore",
    "Heading",
    "InMemoryStore",
    "PlayerState",
    "load_board",
]
