"""
Application services layer.

Provides use-case oriented services that glue core logic with persistence
and outbound notifications.
"""

from .game_service import ActionResult, GameService, SellableCell

__all__ = ["ActionResult", "GameService", "SellableCell"]
