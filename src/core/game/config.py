"""
Game configuration settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from src.core.exceptions import ConfigurationError
from src.core.game.board import CellKey
from src.core.game.directions import Heading

if TYPE_CHECKING:
    from src.settings import GameSettings


@dataclass(frozen=True)
class GameConfig:
    """
    Immutable configuration for a land-grid game.

    Loaded once at startup and passed explicitly to every component.
    """

    board_size: int
    initial_wallet_balance: int
    initial_position: CellKey
    initial_heading: Heading
    initial_bank_balance: int

    turn_bonus: int = 9
    turn_bonus_interval: int = 5
    sale_percent: int = 70
    adjacency_bonus: int = 2

    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.board_size < 1:
            raise ConfigurationError(f"board_size must be >= 1, got {self.board_size}")
        if not self.initial_position.in_bounds(self.board_size):
            raise ConfigurationError(
                f"initial position {self.initial_position.label} is outside a "
                f"{self.board_size}x{self.board_size} board"
            )
        if self.turn_bonus_interval < 1:
            raise ConfigurationError("turn_bonus_interval must be >= 1")

    @classmethod
    def from_settings(cls, settings: "GameSettings") -> "GameConfig":
        return cls(
            board_size=settings.board_size,
            initial_wallet_balance=settings.initial_wallet_balance,
            initial_position=CellKey(settings.initial_x, settings.initial_y),
            initial_heading=settings.initial_direction,
            initial_bank_balance=settings.initial_bank_balance,
            turn_bonus=settings.turn_bonus,
            turn_bonus_interval=settings.turn_bonus_interval,
            sale_percent=settings.sale_percent,
            adjacency_bonus=settings.adjacency_bonus,
            seed=settings.seed,
        )

    def sale_value(self, purchase_price: int) -> int:
        """Buy-back price the bank pays for a parcel (rounded down)."""
        return purchase_price * self.sale_percent // 100

    def is_bonus_turn(self, turns_played: int) -> bool:
        return turns_played > 0 and turns_played % self.turn_bonus_interval == 0
