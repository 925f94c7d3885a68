"""
Central application configuration using pydantic-settings.

This module provides typed access to environment-based configuration for
the game rules (board size, starting balances, bonuses). Every rule value
the engine cannot guess is required: startup fails fast with a
``ValidationError`` when one is missing.

Database configuration lives in `src.data.config.DatabaseSettings`.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.game.directions import Heading


class GameSettings(BaseSettings):
    """
    Game rule configuration.

    Environment variables (prefix: GAME_):
        GAME_BOARD_SIZE             - Side length of the square board (required)
        GAME_INITIAL_WALLET_BALANCE - Coins a new player starts with (required)
        GAME_INITIAL_X              - Starting column (required)
        GAME_INITIAL_Y              - Starting row (required)
        GAME_INITIAL_DIRECTION      - NORTH | EAST | SOUTH | WEST (required)
        GAME_INITIAL_BANK_BALANCE   - Bank balance seeded on first start (required)
        GAME_TURN_BONUS             - Periodic bonus credit (default: 9)
        GAME_TURN_BONUS_INTERVAL    - Bonus every N turns (default: 5)
        GAME_SALE_PERCENT           - Buy-back percentage of purchase price (default: 70)
        GAME_ADJACENCY_BONUS        - Land cost added per owned neighbour (default: 2)
        GAME_SEED                   - Optional RNG seed
        GAME_BOARD_FILE             - Optional JSON board layout used for seeding
        GAME_LOG_LEVEL              - Logging level (default: INFO)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="GAME_",
    )

    board_size: int = Field(ge=1, description="Side length of the square board.")
    initial_wallet_balance: int = Field(ge=0, description="Starting wallet of a new player.")
    initial_x: int = Field(ge=1)
    initial_y: int = Field(ge=1)
    initial_direction: Heading
    initial_bank_balance: int = Field(description="Bank balance seeded when none exists.")

    turn_bonus: int = Field(default=9)
    turn_bonus_interval: int = Field(default=5, ge=1)
    sale_percent: int = Field(default=70, ge=0, le=100)
    adjacency_bonus: int = Field(default=2)

    seed: Optional[int] = None
    board_file: Optional[Path] = None
    log_level: str = Field(default="INFO")

    @field_validator("initial_direction", mode="before")
    @classmethod
    def normalize_direction(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def check_initial_position(self) -> "GameSettings":
        if self.initial_x > self.board_size or self.initial_y > self.board_size:
            raise ValueError(
                f"initial position ({self.initial_x}, {self.initial_y}) is outside "
                f"a {self.board_size}x{self.board_size} board"
            )
        return self


@lru_cache
def get_game_settings() -> GameSettings:
    """Return cached game settings instance."""
    return GameSettings()
