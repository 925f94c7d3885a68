"""
Ownership and settlement: who pays whom when a token lands on a cell.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from src.core.exceptions import BankTransactionFailed, GameError, NotInGame
from src.core.game.board import Cell, CellKey
from src.core.game.config import GameConfig
from src.core.game.liquidation import liquidate
from src.core.game.money import Bank, EventLog, EventType, GameEvent
from src.core.game.player import PlayerState
from src.core.game.store import GameStore

logger = logging.getLogger(__name__)


@dataclass
class Settlement:
    """Outcome of resolving payment for one landing."""

    wallet: int
    amount: int = 0
    eliminated: bool = False
    self_owned: bool = False
    tax_office: bool = False
    events: List[GameEvent] = field(default_factory=list)


def tax_due(cells: Dict[CellKey, Cell], player_id: str) -> int:
    """Tax office charge: total land cost of every parcel the player owns."""
    return sum(cell.land_cost for cell in cells.values() if cell.is_owned_by(player_id))


async def eliminate_player(store: GameStore, player: PlayerState, required: int, wallet: int) -> GameEvent:
    """Remove a player who cannot cover a debt even after liquidation."""
    await store.delete_player(player.player_id)
    logger.info(f"Player {player.player_id} ({player.name}) eliminated: owed {required}, had {wallet}")
    return GameEvent(
        EventType.ELIMINATED,
        player.player_id,
        {"name": player.name, "required": required, "wallet": wallet},
    )


async def _adjust_wallet(store: GameStore, player_id: str, delta: int) -> int:
    balance = await store.apply_wallet_delta(player_id, delta)
    if balance is None:
        raise NotInGame(player_id)
    return balance


async def _pay_counterparty(
    store: GameStore, cell: Cell, amount: int
) -> Tuple[Optional[str], Optional[int], Optional[int]]:
    """
    Credit ``amount`` to the cell owner, or to the bank for state land.

    Returns ``(owner_id, owner_balance, bank_balance)``; ``owner_id`` is
    None when the bank took the payment.
    """
    owner_id = cell.owner_id
    if owner_id is not None:
        owner_balance = await store.apply_wallet_delta(owner_id, amount)
        if owner_balance is not None:
            return owner_id, owner_balance, None
        logger.info(f"Owner {owner_id} of {cell.key.label} no longer plays; routing {amount} to the bank")

    update = await Bank(store).deposit(amount)
    if not update.committed:
        raise BankTransactionFailed(
            f"Settling {abs(amount)} coins on {cell.key.label} failed: the Bank did not respond. Please try again."
        )
    return None, None, update.balance


async def _refund_counterparty(store: GameStore, owner_id: Optional[str], amount: int) -> None:
    if owner_id is not None:
        await store.apply_wallet_delta(owner_id, -amount)
    else:
        await Bank(store).deposit(-amount)


async def settle_landing(
    store: GameStore,
    config: GameConfig,
    player: PlayerState,
    cell: Cell,
    rng: random.Random,
) -> Settlement:
    """
    Charge (or pay out) the landing cost of ``cell`` for ``player``.

    Positive amounts flow from the player to the cell owner, or to the
    bank for state-owned cells; negative amounts flow the other way. If
    the player cannot pay, their parcels are liquidated first; if that
    still falls short the player is eliminated and nothing else happens.

    Every wallet change is written to the store before this returns, so
    ``Settlement.wallet`` is the persisted balance.
    """
    log = EventLog()
    pid = player.player_id
    wallet = player.wallet
    tax_office = cell.is_tax_office

    if cell.is_owned_by(pid):
        log.log(EventType.SELF_LANDING, pid, cell=cell.key)
        return Settlement(wallet=wallet, self_owned=True, events=log.get_events())

    amount = cell.land_cost
    if tax_office:
        amount = tax_due(await store.list_cells(), pid)

    if amount > 0 and wallet < amount:
        result = await liquidate(store, config, pid, wallet, amount, rng)
        log.extend(result.events)
        wallet = result.wallet
        if not result.success:
            log.events.append(await eliminate_player(store, player, amount, wallet))
            return Settlement(
                wallet=wallet,
                amount=amount,
                eliminated=True,
                tax_office=tax_office,
                events=log.get_events(),
            )

    if amount == 0:
        log.log(EventType.FREE_LANDING, pid, cell=cell.key, tax_office=tax_office)
        return Settlement(wallet=wallet, tax_office=tax_office, events=log.get_events())

    # The side giving money up is always charged first; if the other leg
    # fails, the first one is reverted before the error propagates.
    if amount > 0:
        wallet = await _adjust_wallet(store, pid, -amount)
        try:
            owner_id, owner_balance, bank_balance = await _pay_counterparty(store, cell, amount)
        except GameError:
            await store.apply_wallet_delta(pid, amount)
            raise
    else:
        owner_id, owner_balance, bank_balance = await _pay_counterparty(store, cell, amount)
        try:
            wallet = await _adjust_wallet(store, pid, -amount)
        except GameError:
            await _refund_counterparty(store, owner_id, amount)
            raise

    if tax_office:
        event_type = EventType.TAX_PAYMENT
    elif amount > 0:
        event_type = EventType.RENT_PAYMENT
    else:
        event_type = EventType.BONUS_PAYOUT

    log.log(
        event_type,
        pid,
        cell=cell.key,
        amount=amount,
        owner_id=owner_id,
        owner_balance=owner_balance,
        bank_balance=bank_balance,
        wallet=wallet,
    )
    return Settlement(wallet=wallet, amount=amount, tax_office=tax_office, events=log.get_events())
