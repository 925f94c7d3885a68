"""
Player state and management.
"""

from dataclasses import dataclass
from enum import Enum

from src.core.game.board import CellKey
from src.core.game.directions import Heading


class PlayerStatus(str, Enum):
    ACTIVE = "active"
    NONE = "none"


@dataclass
class PlayerState:
    """Represents the complete state of a player in the game."""

    player_id: str
    name: str
    position: CellKey
    heading: Heading
    wallet: int
    turns_played: int = 0
    skip_next_turn: bool = False
    status: PlayerStatus = PlayerStatus.ACTIVE

    @property
    def is_active(self) -> bool:
        return self.status == PlayerStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"PlayerState(id={self.player_id}, name='{self.name}', "
            f"wallet={self.wallet}, position={self.position.label}, heading={self.heading.value})"
        )
