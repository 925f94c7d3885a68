"""
Money management and event logging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from src.core.game.store import BankUpdate, GameStore

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of game events."""

    TURN_SKIPPED = "turn_skipped"
    DICE_ROLL = "dice_roll"
    MOVE = "move"

    SELF_LANDING = "self_landing"
    RENT_PAYMENT = "rent_payment"
    BONUS_PAYOUT = "bonus_payout"
    TAX_PAYMENT = "tax_payment"
    FREE_LANDING = "free_landing"

    AUTO_SALE = "auto_sale"
    AUTO_SALE_FAILED = "auto_sale_failed"

    SPECIAL_EFFECT = "special_effect"
    TURN_BONUS = "turn_bonus"

    PURCHASE = "purchase"
    SALE = "sale"

    ELIMINATED = "eliminated"


@dataclass
class GameEvent:
    """A logged event in the game."""

    event_type: EventType
    player_id: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __repr__(self) -> str:
        player_str = f"P{self.player_id}" if self.player_id is not None else "System"
        return f"[{player_str}] {self.event_type.value}: {self.details}"


class EventLog:
    """Collects the events produced while resolving one action."""

    def __init__(self):
        self.events: List[GameEvent] = []

    def log(self, event_type: EventType, player_id: Optional[str] = None, **details: Any) -> GameEvent:
        """Log a game event."""
        event = GameEvent(event_type, player_id, details)
        self.events.append(event)
        return event

    def extend(self, events: List[GameEvent]) -> None:
        self.events.extend(events)

    def get_events(self) -> List[GameEvent]:
        """Get all logged events."""
        return self.events.copy()


class Bank:
    """
    Payer and payee of last resort.

    The balance lives in the store and is only ever changed through
    atomic deltas. It is allowed to go negative (buy-backs are never
    refused for lack of bank funds).
    """

    def __init__(self, store: "GameStore"):
        self.store = store

    async def deposit(self, amount: int) -> "BankUpdate":
        """Move ``amount`` into the bank (negative amounts flow out)."""
        return await self._apply(amount)

    async def withdraw(self, amount: int) -> "BankUpdate":
        """Pay ``amount`` out of the bank."""
        return await self._apply(-amount)

    async def _apply(self, delta: int) -> "BankUpdate":
        update = await self.store.apply_bank_delta(delta)
        if not update.committed:
            logger.warning(f"Bank transaction of {delta:+d} was not committed")
        elif update.balance is not None and update.balance < 0 and delta < 0:
            logger.warning(f"Bank balance is negative: {update.balance}")
        return update
