"""
Forced liquidation (auto-sale) of a player's parcels to cover a debt.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List

from src.core.exceptions import NotInGame
from src.core.game.board import UNOWNED, Cell, OwnedBy
from src.core.game.config import GameConfig
from src.core.game.money import Bank, EventLog, EventType, GameEvent
from src.core.game.store import GameStore

logger = logging.getLogger(__name__)


@dataclass
class LiquidationResult:
    wallet: int
    success: bool
    events: List[GameEvent] = field(default_factory=list)

    @property
    def sold(self) -> List[GameEvent]:
        return [e for e in self.events if e.event_type == EventType.AUTO_SALE]


async def sellable_cells(store: GameStore, player_id: str) -> List[Cell]:
    """Cells owned by the player that have a purchase price."""
    cells = await store.list_cells()
    return [c for c in cells.values() if c.is_owned_by(player_id) and c.is_purchasable]


async def liquidate(
    store: GameStore,
    config: GameConfig,
    player_id: str,
    wallet: int,
    required: int,
    rng: random.Random,
) -> LiquidationResult:
    """
    Sell random parcels back to the bank until ``wallet >= required``.

    Each iteration draws uniformly from the parcels still left. A parcel
    whose sale fails is dropped from the pool and not retried. The bank
    funds every buy-back, even into a negative balance. Each sale is
    credited to the stored wallet as it happens.
    """
    log = EventLog()
    bank = Bank(store)
    remaining = await sellable_cells(store, player_id)

    while wallet < required and remaining:
        cell = remaining.pop(rng.randrange(len(remaining)))
        sale_price = config.sale_value(cell.purchase_price)

        update = await bank.withdraw(sale_price)
        if not update.committed:
            log.log(EventType.AUTO_SALE_FAILED, player_id, cell=cell.key, price=sale_price, reason="bank")
            continue

        if not await store.transfer_cell(cell.key, OwnedBy(player_id), UNOWNED):
            # Ownership changed under us; give the bank its money back.
            await bank.deposit(sale_price)
            log.log(EventType.AUTO_SALE_FAILED, player_id, cell=cell.key, price=sale_price, reason="ownership")
            continue

        balance = await store.apply_wallet_delta(player_id, sale_price)
        if balance is None:
            await store.transfer_cell(cell.key, UNOWNED, OwnedBy(player_id))
            await bank.deposit(sale_price)
            raise NotInGame(player_id)
        wallet = balance
        log.log(EventType.AUTO_SALE, player_id, cell=cell.key, price=sale_price, bank_balance=update.balance)
        logger.info(f"Auto-sold {cell.key.label} of player {player_id} for {sale_price}")

    success = wallet >= required
    if not success:
        logger.info(f"Liquidation for player {player_id} exhausted: {wallet} < {required}")
    return LiquidationResult(wallet=wallet, success=success, events=log.get_events())
