"""
PostgreSQL-backed game store.

Implements the GameStore interface on top of the async SQLAlchemy
session factory. Every call runs in its own short transaction; shared
values (bank balance, wallets, cell ownership) are changed with single
UPDATE statements so concurrent actions never overwrite each other.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Iterable, Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.core.exceptions import DatabaseError
from src.core.game.board import (
    Cell,
    CellEffect,
    CellKey,
    CellType,
    Ownership,
    Unowned,
    owner_of,
    ownership_for,
)
from src.core.game.directions import Heading
from src.core.game.player import PlayerState, PlayerStatus
from src.core.game.store import _UNSET, BankUpdate, GameStore
from src.data.models import BANK_ACCOUNT_ID, BankAccount, BoardCell, PlayerRecord

logger = logging.getLogger(__name__)


# ---- Record conversion ----


def player_from_record(record: PlayerRecord) -> PlayerState:
    return PlayerState(
        player_id=record.player_id,
        name=record.name,
        position=CellKey(record.x, record.y),
        heading=Heading(record.heading),
        wallet=record.wallet,
        turns_played=record.turns_played,
        skip_next_turn=record.skip_next_turn,
        status=PlayerStatus(record.status),
    )


def player_columns(**fields: Any) -> Dict[str, Any]:
    """Translate PlayerState field names/values into PlayerRecord columns."""
    columns: Dict[str, Any] = {}
    for name, value in fields.items():
        if name == "position":
            columns["x"], columns["y"] = value.x, value.y
        elif name in ("heading", "status"):
            columns[name] = value.value
        else:
            columns[name] = value
    return columns


def cell_from_record(record: BoardCell) -> Cell:
    return Cell(
        key=CellKey(record.x, record.y),
        ownership=ownership_for(record.owner_id),
        purchase_price=record.purchase_price,
        land_cost=record.land_cost,
        cell_type=CellType(record.cell_type),
        effect=CellEffect(record.effect),
        message=record.message,
        effect_value=record.effect_value,
    )


def cell_to_record(cell: Cell) -> BoardCell:
    return BoardCell(
        x=cell.key.x,
        y=cell.key.y,
        owner_id=cell.owner_id,
        purchase_price=cell.purchase_price,
        land_cost=cell.land_cost,
        cell_type=cell.cell_type.value,
        effect=cell.effect.value,
        message=cell.message,
        effect_value=cell.effect_value,
    )


class SqlGameStore(GameStore):
    """
    GameStore backed by the ``players``, ``board_cells`` and ``bank`` tables.

    Args:
        session_factory: Factory returned by ``init_db``
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error(f"Database operation failed: {e}")
                raise DatabaseError(str(e)) from e

    # ---- Players ----

    async def get_player(self, player_id: str) -> Optional[PlayerState]:
        async with self._transaction() as session:
            record = await session.get(PlayerRecord, player_id)
            return player_from_record(record) if record else None

    async def save_player(self, player: PlayerState) -> None:
        record = PlayerRecord(
            player_id=player.player_id,
            **player_columns(
                name=player.name,
                position=player.position,
                heading=player.heading,
                wallet=player.wallet,
                turns_played=player.turns_played,
                skip_next_turn=player.skip_next_turn,
                status=player.status,
            ),
        )
        async with self._transaction() as session:
            await session.merge(record)

    async def update_player(self, player_id: str, **fields: Any) -> Optional[PlayerState]:
        async with self._transaction() as session:
            record = await session.get(PlayerRecord, player_id, with_for_update=True)
            if record is None:
                return None
            for column, value in player_columns(**fields).items():
                setattr(record, column, value)
            await session.flush()
            return player_from_record(record)

    async def apply_wallet_delta(self, player_id: str, delta: int, floor: Optional[int] = None) -> Optional[int]:
        stmt = update(PlayerRecord).where(PlayerRecord.player_id == player_id)
        if floor is not None:
            stmt = stmt.where(PlayerRecord.wallet + delta >= floor)
        stmt = (
            stmt.values(wallet=PlayerRecord.wallet + delta)
            .returning(PlayerRecord.wallet)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return result.scalar_one_or_none()

    async def delete_player(self, player_id: str) -> None:
        async with self._transaction() as session:
            await session.execute(delete(PlayerRecord).where(PlayerRecord.player_id == player_id))

    async def list_players(self) -> Dict[str, PlayerState]:
        async with self._transaction() as session:
            result = await session.execute(select(PlayerRecord).order_by(PlayerRecord.player_id))
            return {record.player_id: player_from_record(record) for record in result.scalars()}

    # ---- Board ----

    async def get_cell(self, key: CellKey) -> Optional[Cell]:
        async with self._transaction() as session:
            record = await session.get(BoardCell, (key.x, key.y))
            return cell_from_record(record) if record else None

    async def list_cells(self) -> Dict[CellKey, Cell]:
        async with self._transaction() as session:
            result = await session.execute(select(BoardCell).order_by(BoardCell.x, BoardCell.y))
            return {CellKey(r.x, r.y): cell_from_record(r) for r in result.scalars()}

    async def update_cell(self, key: CellKey, *, ownership: Ownership = _UNSET, land_cost: int = _UNSET) -> None:
        values: Dict[str, Any] = {}
        if ownership is not _UNSET:
            values["owner_id"] = owner_of(ownership)
        if land_cost is not _UNSET:
            values["land_cost"] = land_cost
        if not values:
            return
        stmt = (
            update(BoardCell)
            .where(BoardCell.x == key.x, BoardCell.y == key.y)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            await session.execute(stmt)

    async def transfer_cell(self, key: CellKey, expected: Ownership, new: Ownership) -> bool:
        if isinstance(expected, Unowned):
            owner_matches = BoardCell.owner_id.is_(None)
        else:
            owner_matches = BoardCell.owner_id == owner_of(expected)
        stmt = (
            update(BoardCell)
            .where(BoardCell.x == key.x, BoardCell.y == key.y, owner_matches)
            .values(owner_id=owner_of(new))
            .returning(BoardCell.x)
            .execution_options(synchronize_session=False)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            transferred = result.first() is not None
        if not transferred:
            logger.info(f"Ownership of {key.label} changed concurrently, transfer rejected")
        return transferred

    async def seed_board(self, cells: Iterable[Cell]) -> int:
        """Insert or replace board cells. Returns the number written."""
        count = 0
        async with self._transaction() as session:
            for cell in cells:
                await session.merge(cell_to_record(cell))
                count += 1
        logger.info(f"Seeded {count} board cells")
        return count

    async def count_owned_cells(self) -> Dict[str, int]:
        """Number of cells held by each player."""
        stmt = (
            select(BoardCell.owner_id, func.count())
            .where(BoardCell.owner_id.is_not(None))
            .group_by(BoardCell.owner_id)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return {owner_id: count for owner_id, count in result.all()}

    # ---- Bank ----

    async def get_bank_balance(self) -> Optional[int]:
        async with self._transaction() as session:
            result = await session.execute(
                select(BankAccount.balance).where(BankAccount.id == BANK_ACCOUNT_ID)
            )
            return result.scalar_one_or_none()

    async def init_bank_balance(self, balance: int) -> bool:
        stmt = (
            pg_insert(BankAccount)
            .values(id=BANK_ACCOUNT_ID, balance=balance)
            .on_conflict_do_nothing(index_elements=[BankAccount.id])
            .returning(BankAccount.id)
        )
        async with self._transaction() as session:
            result = await session.execute(stmt)
            return result.first() is not None

    async def apply_bank_delta(self, delta: int) -> BankUpdate:
        stmt = pg_insert(BankAccount).values(id=BANK_ACCOUNT_ID, balance=delta)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BankAccount.id],
            set_={"balance": BankAccount.balance + delta, "updated_at": func.now()},
        ).returning(BankAccount.balance)
        try:
            async with self._transaction() as session:
                result = await session.execute(stmt)
                return BankUpdate(committed=True, balance=result.scalar_one())
        except DatabaseError as e:
            logger.warning(f"Bank update of {delta:+d} rolled back: {e}")
            return BankUpdate(committed=False)
