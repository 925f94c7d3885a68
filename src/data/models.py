"""
SQLAlchemy models for the land-grid game.

Architecture:
- PlayerRecord: one row per active player (deleted on elimination)
- BoardCell: one row per grid cell, keyed by (x, y)
- BankAccount: single-row table holding the shared bank balance
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

BANK_ACCOUNT_ID = 1


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


def utc_now() -> datetime:
    """Generate timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class PlayerRecord(Base):
    """Player state persisted between actions."""

    __tablename__ = "players"

    player_id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Stable per-user identifier from the transport",
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Position and heading
    x: Mapped[int] = mapped_column(Integer, nullable=False)
    y: Mapped[int] = mapped_column(Integer, nullable=False)
    heading: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        comment="NORTH | EAST | SOUTH | WEST",
    )

    wallet: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    turns_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skip_next_turn: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="active",
        comment="active | none",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<PlayerRecord(player_id={self.player_id}, name={self.name}, wallet={self.wallet})>"


class BoardCell(Base):
    """
    A grid cell.

    ``owner_id`` is NULL for state-owned cells.
    """

    __tablename__ = "board_cells"

    x: Mapped[int] = mapped_column(Integer, primary_key=True)
    y: Mapped[int] = mapped_column(Integer, primary_key=True)

    owner_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="Owning player id, NULL when owned by the State",
    )
    purchase_price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="0 means the cell is not for sale",
    )
    land_cost: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Negative values are bonuses paid to the visitor",
    )
    cell_type: Mapped[str] = mapped_column(String(16), nullable=False, default="normal")
    effect: Mapped[str] = mapped_column(String(32), nullable=False, default="none")
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")
    effect_value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<BoardCell(x={self.x}, y={self.y}, owner={self.owner_id})>"


class BankAccount(Base):
    """Single-row table with the shared bank balance."""

    __tablename__ = "bank"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=BANK_ACCOUNT_ID)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<BankAccount(balance={self.balance})>"
