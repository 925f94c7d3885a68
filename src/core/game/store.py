"""
Persistence interface consumed by the engine, plus an in-memory backend.

The engine never performs read-modify-write on shared values: the bank
balance and wallets change through atomic deltas, and cell ownership
changes through a conditional transfer that re-validates the current
owner at write time.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Optional

from src.core.game.board import Cell, CellKey, Ownership
from src.core.game.player import PlayerState

logger = logging.getLogger(__name__)

_UNSET: Any = object()


@dataclass(frozen=True)
class BankUpdate:
    """Outcome of an atomic bank balance update."""

    committed: bool
    balance: Optional[int] = None


class GameStore(ABC):
    """Key-value style storage for players, board cells and the bank."""

    # ---- Players ----

    @abstractmethod
    async def get_player(self, player_id: str) -> Optional[PlayerState]:
        ...

    @abstractmethod
    async def save_player(self, player: PlayerState) -> None:
        """Write a full player record (insert or replace)."""

    @abstractmethod
    async def update_player(self, player_id: str, **fields: Any) -> Optional[PlayerState]:
        """Merge the given fields into an existing record; None if absent."""

    @abstractmethod
    async def apply_wallet_delta(self, player_id: str, delta: int, floor: Optional[int] = None) -> Optional[int]:
        """
        Atomically add ``delta`` to a wallet.

        Returns the new balance, or None if the player does not exist or
        the result would drop below ``floor``.
        """

    @abstractmethod
    async def delete_player(self, player_id: str) -> None:
        ...

    @abstractmethod
    async def list_players(self) -> Dict[str, PlayerState]:
        ...

    # ---- Board ----

    @abstractmethod
    async def get_cell(self, key: CellKey) -> Optional[Cell]:
        ...

    @abstractmethod
    async def list_cells(self) -> Dict[CellKey, Cell]:
        ...

    @abstractmethod
    async def update_cell(self, key: CellKey, *, ownership: Ownership = _UNSET, land_cost: int = _UNSET) -> None:
        ...

    @abstractmethod
    async def transfer_cell(self, key: CellKey, expected: Ownership, new: Ownership) -> bool:
        """Set ownership to ``new`` only if it currently equals ``expected``."""

    # ---- Bank ----

    @abstractmethod
    async def get_bank_balance(self) -> Optional[int]:
        ...

    @abstractmethod
    async def init_bank_balance(self, balance: int) -> bool:
        """Seed the bank balance if none exists. Returns True if seeded."""

    @abstractmethod
    async def apply_bank_delta(self, delta: int) -> BankUpdate:
        """Atomically add ``delta`` to the bank balance (may go negative)."""


class InMemoryStore(GameStore):
    """
    Process-local store.

    Mutations run under a single asyncio lock, so each operation is
    atomic with respect to other coroutines on the same event loop.
    """

    def __init__(self, cells: Iterable[Cell] = (), bank_balance: Optional[int] = None):
        self._players: Dict[str, PlayerState] = {}
        self._cells: Dict[CellKey, Cell] = {cell.key: replace(cell) for cell in cells}
        self._bank_balance = bank_balance
        self._lock = asyncio.Lock()

    async def get_player(self, player_id: str) -> Optional[PlayerState]:
        player = self._players.get(player_id)
        return replace(player) if player else None

    async def save_player(self, player: PlayerState) -> None:
        async with self._lock:
            self._players[player.player_id] = replace(player)

    async def update_player(self, player_id: str, **fields: Any) -> Optional[PlayerState]:
        async with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            updated = replace(player, **fields)
            self._players[player_id] = updated
            return replace(updated)

    async def apply_wallet_delta(self, player_id: str, delta: int, floor: Optional[int] = None) -> Optional[int]:
        async with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return None
            new_wallet = player.wallet + delta
            if floor is not None and new_wallet < floor:
                return None
            player.wallet = new_wallet
            return new_wallet

    async def delete_player(self, player_id: str) -> None:
        async with self._lock:
            self._players.pop(player_id, None)

    async def list_players(self) -> Dict[str, PlayerState]:
        return {pid: replace(p) for pid, p in self._players.items()}

    async def get_cell(self, key: CellKey) -> Optional[Cell]:
        cell = self._cells.get(key)
        return replace(cell) if cell else None

    async def list_cells(self) -> Dict[CellKey, Cell]:
        return {key: replace(cell) for key, cell in self._cells.items()}

    async def update_cell(self, key: CellKey, *, ownership: Ownership = _UNSET, land_cost: int = _UNSET) -> None:
        async with self._lock:
            cell = self._cells[key]
            if ownership is not _UNSET:
                cell.ownership = ownership
            if land_cost is not _UNSET:
                cell.land_cost = land_cost

    async def transfer_cell(self, key: CellKey, expected: Ownership, new: Ownership) -> bool:
        async with self._lock:
            cell = self._cells.get(key)
            if cell is None or cell.ownership != expected:
                return False
            cell.ownership = new
            return True

    async def get_bank_balance(self) -> Optional[int]:
        return self._bank_balance

    async def init_bank_balance(self, balance: int) -> bool:
        async with self._lock:
            if self._bank_balance is not None:
                return False
            self._bank_balance = balance
            return True

    async def apply_bank_delta(self, delta: int) -> BankUpdate:
        async with self._lock:
            self._bank_balance = (self._bank_balance or 0) + delta
            return BankUpdate(committed=True, balance=self._bank_balance)
