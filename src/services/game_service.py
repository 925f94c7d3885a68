"""
GameService orchestrates the core game engine with persistence and notifications.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from src.core.events import Notification, Notifier, NullNotifier, deliver
from src.core.exceptions import (
    AlreadyOwned,
    BankTransactionFailed,
    CellNotFound,
    DatabaseError,
    GameError,
    InsufficientFunds,
    NotCellOwner,
    NotInGame,
    NotPurchasable,
    OwnedByOther,
)
from src.core.game.board import UNOWNED, CellKey, OwnedBy
from src.core.game.config import GameConfig
from src.core.game.effects import apply_special_effect
from src.core.game.money import Bank, EventLog, EventType, GameEvent
from src.core.game.movement import resolve_move, roll_dice
from src.core.game.player import PlayerState, PlayerStatus
from src.core.game.settlement import settle_landing
from src.core.game.store import GameStore
from src.services import messages
from src.services.snapshot import serialize_snapshot

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """What an action tells the acting player and everyone else."""

    message: str
    broadcasts: List[Notification] = field(default_factory=list)
    events: List[GameEvent] = field(default_factory=list)
    error: Optional[GameError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SellableCell:
    cell_key: CellKey
    estimated_price: int


class GameService:
    """
    Use-case service for the land-grid game.

    One public coroutine per player action. Actions of the same player
    are serialized; different players may act concurrently and only
    share state through the store's atomic operations.
    """

    def __init__(
        self,
        config: GameConfig,
        store: GameStore,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.store = store
        self.notifier = notifier or NullNotifier()
        self.rng = rng or random.Random(config.seed)
        self.bank = Bank(store)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def initialize(self) -> int:
        """Seed the bank balance on first start and return the current balance."""
        if await self.store.init_bank_balance(self.config.initial_bank_balance):
            logger.info(f"Bank balance seeded with {self.config.initial_bank_balance}")
        balance = await self.store.get_bank_balance()
        logger.info(f"Bank balance loaded: {balance}")
        return balance

    # ---- Actions ----

    async def start_game(self, player_id: str, display_name: str) -> str:
        """Join the game, or describe the current state if already playing."""
        async with self._locks[player_id]:
            try:
                existing = await self.store.get_player(player_id)
                if existing is not None and existing.is_active:
                    return messages.already_playing(existing)

                player = PlayerState(
                    player_id=player_id,
                    name=display_name,
                    position=self.config.initial_position,
                    heading=self.config.initial_heading,
                    wallet=self.config.initial_wallet_balance,
                    turns_played=0,
                    status=PlayerStatus.ACTIVE,
                )
                await self.store.save_player(player)
            except DatabaseError:
                logger.exception(f"Failed to start game for player {player_id}")
                return messages.RETRY_MESSAGE

        logger.info(f"Player {player_id} ({display_name}) joined the game")
        return messages.welcome(player)

    async def take_turn(self, player_id: str) -> ActionResult:
        return await self._run(player_id, "turn", lambda: self._take_turn(player_id))

    async def buy_current_cell(self, player_id: str) -> ActionResult:
        return await self._run(player_id, "buy", lambda: self._buy_current_cell(player_id))

    async def sell_cell(self, player_id: str, cell_key: Union[str, CellKey]) -> ActionResult:
        return await self._run(player_id, "sell", lambda: self._sell_cell(player_id, cell_key))

    async def list_sellable_cells(self, player_id: str) -> List[SellableCell]:
        """
        Parcels the player could sell, with their buy-back price.

        Raises NotInGame for unknown players and DatabaseError when the
        store cannot be read.
        """
        try:
            await self._require_active(player_id)
            cells = await self.store.list_cells()
        except DatabaseError:
            logger.exception(f"Failed to list sellable cells for player {player_id}")
            raise
        return [
            SellableCell(key, self.config.sale_value(cell.purchase_price))
            for key, cell in sorted(cells.items())
            if cell.is_owned_by(player_id) and cell.is_purchasable
        ]

    async def snapshot(self) -> Dict[str, Any]:
        return serialize_snapshot(
            await self.store.list_players(),
            await self.store.list_cells(),
            await self.store.get_bank_balance(),
        )

    # ---- Internals ----

    async def _run(
        self,
        player_id: str,
        action: str,
        handler: Callable[[], Awaitable[ActionResult]],
    ) -> ActionResult:
        async with self._locks[player_id]:
            try:
                result = await handler()
            except DatabaseError as e:
                logger.exception(f"Persistence failure during {action} for player {player_id}")
                return ActionResult(messages.RETRY_MESSAGE, error=e)
            except NotInGame as e:
                return ActionResult(messages.not_in_game(), error=e)
            except GameError as e:
                logger.info(f"{action} rejected for player {player_id}: {e}")
                return ActionResult(str(e), error=e)

        await deliver(self.notifier, result.broadcasts)
        return result

    async def _require_active(self, player_id: str) -> PlayerState:
        player = await self.store.get_player(player_id)
        if player is None or not player.is_active:
            raise NotInGame(player_id)
        return player

    async def _others(self, player_id: str) -> Dict[str, PlayerState]:
        players = await self.store.list_players()
        return {pid: p for pid, p in players.items() if pid != player_id and p.is_active}

    @staticmethod
    def _to_all(recipients: Dict[str, PlayerState], text: str) -> List[Notification]:
        return [Notification(pid, text) for pid in recipients]

    async def _take_turn(self, player_id: str) -> ActionResult:
        player = await self._require_active(player_id)

        if player.skip_next_turn:
            await self.store.update_player(player_id, skip_next_turn=False)
            player.skip_next_turn = False
            logger.debug(f"Player {player_id} skips a turn")
            return ActionResult(
                messages.turn_skipped(player),
                events=[GameEvent(EventType.TURN_SKIPPED, player_id)],
            )

        log = EventLog()
        steps, choice = roll_dice(self.rng)
        move = resolve_move(player.position, player.heading, steps, choice, self.config.board_size)
        log.log(EventType.DICE_ROLL, player_id, steps=steps, turn=choice.name)
        log.log(
            EventType.MOVE,
            player_id,
            **{"from": player.position, "to": move.position, "heading": move.heading.value},
        )

        cell = await self.store.get_cell(move.position)
        if cell is None:
            raise CellNotFound(move.position)

        players = await self.store.list_players()
        names = {pid: p.name for pid, p in players.items()}
        others = {pid: p for pid, p in players.items() if pid != player_id and p.is_active}

        settlement = await settle_landing(self.store, self.config, player, cell, self.rng)
        log.extend(settlement.events)

        lines = [messages.roll_line(steps, choice)]
        lines.extend(messages.describe_events(settlement.events, names))
        broadcasts: List[Notification] = []

        sold = [e.details["cell"] for e in settlement.events if e.event_type == EventType.AUTO_SALE]
        if sold:
            broadcasts.extend(self._to_all(others, messages.forced_sale_broadcast(player.name, sold)))

        if settlement.eliminated:
            broadcasts.extend(self._to_all(others, messages.eliminated_broadcast(player.name)))
            return ActionResult("\n".join(lines), broadcasts, log.get_events())

        for event in settlement.events:
            d = event.details
            if event.event_type == EventType.RENT_PAYMENT and d.get("owner_id") is not None:
                broadcasts.append(
                    Notification(
                        d["owner_id"],
                        messages.rent_received(player.name, cell.key, d["amount"], d["owner_balance"]),
                    )
                )

        effect = apply_special_effect(cell, move.position, move.heading, self.config.board_size, player_id)
        log.extend(effect.events)
        lines.extend(messages.describe_events(effect.events, names))

        turns_played = player.turns_played + 1
        bonus = 0
        bonus_turn = self.config.is_bonus_turn(turns_played)
        if bonus_turn:
            bonus = self.config.turn_bonus
            log.log(EventType.TURN_BONUS, player_id, amount=self.config.turn_bonus, turn=turns_played)

        fields: Dict[str, Any] = {
            "position": effect.position,
            "heading": move.heading,
            "turns_played": turns_played,
            "status": PlayerStatus.ACTIVE,
        }
        if effect.skip_next_turn:
            fields["skip_next_turn"] = True
        if await self.store.update_player(player_id, **fields) is None:
            raise NotInGame(player_id)
        # Settlement already persisted the landing payment; only the bonus is left.
        final_wallet = await self.store.apply_wallet_delta(player_id, bonus)
        if final_wallet is None:
            raise NotInGame(player_id)

        lines.append("")
        lines.append(messages.cell_details(cell, names))
        lines.append(messages.position_line(effect.position, move.heading, final_wallet, turns_played))
        if bonus_turn:
            lines.append(messages.bonus_line(turns_played, self.config.turn_bonus))

        special = cell.message if cell.is_special else None
        broadcasts.extend(
            self._to_all(
                others,
                messages.moved_broadcast(player.name, effect.position, special, turns_played if bonus_turn else None),
            )
        )
        logger.debug(
            f"Player {player_id} turn {turns_played}: {player.position.label} -> {effect.position.label}, "
            f"wallet {player.wallet} -> {final_wallet}"
        )
        return ActionResult("\n".join(lines), broadcasts, log.get_events())

    async def _buy_current_cell(self, player_id: str) -> ActionResult:
        player = await self._require_active(player_id)
        key = player.position
        cell = await self.store.get_cell(key)
        if cell is None:
            raise CellNotFound(key)

        if not cell.is_purchasable:
            raise NotPurchasable(f"Cell {key.label} is not for sale.")
        if cell.is_owned_by(player_id):
            raise AlreadyOwned(f"You already own {key.label}.")
        if cell.owner_id is not None:
            raise await self._owned_by_other(key, cell.owner_id)

        price = cell.purchase_price
        if player.wallet < price:
            raise InsufficientFunds(
                f"Not enough coins to buy {key.label}: it costs {price}, you have {player.wallet}.",
                required=price,
                available=player.wallet,
            )

        if not await self.store.transfer_cell(key, UNOWNED, OwnedBy(player_id)):
            latest = await self.store.get_cell(key)
            raise await self._owned_by_other(key, latest.owner_id if latest else None)

        wallet = await self.store.apply_wallet_delta(player_id, -price, floor=0)
        if wallet is None:
            await self.store.transfer_cell(key, OwnedBy(player_id), UNOWNED)
            raise InsufficientFunds(
                f"Not enough coins to buy {key.label}.", required=price, available=player.wallet
            )
        update = await self.bank.deposit(price)
        if not update.committed:
            await self.store.apply_wallet_delta(player_id, price)
            await self.store.transfer_cell(key, OwnedBy(player_id), UNOWNED)
            raise BankTransactionFailed(
                f"Buying {key.label} failed: the Bank could not take the payment. Please try again."
            )

        cells = await self.store.list_cells()
        owned_neighbours = sum(
            1 for k in key.neighbours(self.config.board_size) if k in cells and cells[k].is_owned_by(player_id)
        )
        adjacency = owned_neighbours * self.config.adjacency_bonus
        cell.ownership = OwnedBy(player_id)
        if adjacency:
            cell.land_cost += adjacency
            await self.store.update_cell(key, land_cost=cell.land_cost)

        logger.info(f"Player {player_id} bought {key.label} for {price} (land cost {cell.land_cost})")
        event = GameEvent(
            EventType.PURCHASE,
            player_id,
            {"cell": key, "price": price, "land_cost": cell.land_cost, "adjacency_bonus": adjacency},
        )
        others = await self._others(player_id)
        return ActionResult(
            messages.purchased(cell, price, wallet, adjacency),
            self._to_all(others, messages.purchased_broadcast(player.name, key)),
            [event],
        )

    async def _owned_by_other(self, key: CellKey, owner_id: Optional[str]) -> OwnedByOther:
        owner = await self.store.get_player(owner_id) if owner_id else None
        name = owner.name if owner else "another player"
        return OwnedByOther(f"{key.label} already belongs to {name}.", owner_id or "")

    async def _sell_cell(self, player_id: str, cell_key: Union[str, CellKey]) -> ActionResult:
        player = await self._require_active(player_id)
        if isinstance(cell_key, CellKey):
            key = cell_key
        else:
            try:
                key = CellKey.parse(cell_key)
            except ValueError:
                raise CellNotFound(cell_key)

        cell = await self.store.get_cell(key)
        if cell is None:
            raise CellNotFound(key)
        if not cell.is_owned_by(player_id):
            raise NotCellOwner(f"You do not own {key.label}, or it has already been sold.")

        price = self.config.sale_value(cell.purchase_price)
        update = await self.bank.withdraw(price)
        if not update.committed:
            raise BankTransactionFailed(f"Selling {key.label} failed: the Bank could not pay. Please try again.")

        if not await self.store.transfer_cell(key, OwnedBy(player_id), UNOWNED):
            await self.bank.deposit(price)
            raise NotCellOwner(f"You do not own {key.label}, or it has already been sold.")

        wallet = await self.store.apply_wallet_delta(player_id, price)
        if wallet is None:
            raise NotInGame(player_id)

        logger.info(f"Player {player_id} sold {key.label} for {price}")
        event = GameEvent(EventType.SALE, player_id, {"cell": key, "price": price, "bank_balance": update.balance})
        others = await self._others(player_id)
        return ActionResult(
            messages.sold(key, price, wallet),
            self._to_all(others, messages.sold_broadcast(player.name, key)),
            [event],
        )
