"""
Custom exception hierarchy for the land-grid engine and services.

Provides typed errors that can be handled consistently across
the core engine, services, and API layer.
"""


class GameError(Exception):
    """Base exception for all game-related errors."""


class ConfigurationError(GameError):
    """Game configuration is missing or inconsistent."""


class NotInGame(GameError):
    """Action requires an active player, but the player has not started."""

    def __init__(self, player_id: str):
        super().__init__(f"Player {player_id} is not in the game")
        self.player_id = player_id


class CellNotFound(GameError):
    """Referenced cell is not part of the configured board."""

    def __init__(self, key: object):
        super().__init__(f"Cell {key} does not exist")
        self.key = key


class NotPurchasable(GameError):
    """Cell has no purchase price."""


class AlreadyOwned(GameError):
    """Buyer already owns the cell."""


class OwnedByOther(GameError):
    """Cell belongs to another player."""

    def __init__(self, message: str, owner_id: str):
        super().__init__(message)
        self.owner_id = owner_id


class InsufficientFunds(GameError):
    """Wallet does not cover the price."""

    def __init__(self, message: str, required: int, available: int):
        super().__init__(message)
        self.required = required
        self.available = available


class NotCellOwner(GameError):
    """Seller does not own the cell."""


class BankTransactionFailed(GameError):
    """Atomic bank balance update was rejected."""


class DatabaseError(GameError):
    """Database operation failed."""
