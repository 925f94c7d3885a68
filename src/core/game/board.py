"""
Board cells, cell keys and ownership.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Union

# Orthogonal neighbour offsets
ADJACENT_OFFSETS = ((0, 1), (0, -1), (1, 0), (-1, 0))

_TOKEN = re.compile(r"(-?\d+)_(-?\d+)")


class CellKey(NamedTuple):
    """Typed (x, y) coordinate of a board cell."""

    x: int
    y: int

    @classmethod
    def parse(cls, token: str) -> "CellKey":
        """Parse a transport token such as ``"2_3"``."""
        match = _TOKEN.fullmatch(token)
        if match is None:
            raise ValueError(f"Malformed cell key: {token!r}")
        return cls(int(match.group(1)), int(match.group(2)))

    @property
    def token(self) -> str:
        return f"{self.x}_{self.y}"

    @property
    def label(self) -> str:
        return f"({self.x}, {self.y})"

    def in_bounds(self, board_size: int) -> bool:
        return 1 <= self.x <= board_size and 1 <= self.y <= board_size

    def neighbours(self, board_size: int) -> Iterator["CellKey"]:
        """Yield orthogonally adjacent keys that lie on the board."""
        for dx, dy in ADJACENT_OFFSETS:
            key = CellKey(self.x + dx, self.y + dy)
            if key.in_bounds(board_size):
                yield key


@dataclass(frozen=True)
class Unowned:
    """Cell belongs to the state (the bank)."""

    def __repr__(self) -> str:
        return "Unowned"


@dataclass(frozen=True)
class OwnedBy:
    """Cell belongs to a player."""

    player_id: str


Ownership = Union[Unowned, OwnedBy]

UNOWNED = Unowned()


def owner_of(ownership: Ownership) -> Optional[str]:
    """Return the owning player id, or None for state-owned cells."""
    return ownership.player_id if isinstance(ownership, OwnedBy) else None


def ownership_for(player_id: Optional[str]) -> Ownership:
    return OwnedBy(player_id) if player_id else UNOWNED


class CellType(str, Enum):
    NORMAL = "normal"
    SPECIAL = "special"


class CellEffect(str, Enum):
    NONE = "none"
    TAX_OFFICE = "tax_office"
    GO_BACK = "go_back"
    EXTRA_TURN = "extra_turn"
    LOSE_TURN = "lose_turn"


@dataclass
class Cell:
    """A single board cell."""

    key: CellKey
    ownership: Ownership = UNOWNED
    purchase_price: int = 0
    land_cost: int = 0
    cell_type: CellType = CellType.NORMAL
    effect: CellEffect = CellEffect.NONE
    message: str = ""
    effect_value: int = 0

    @property
    def is_purchasable(self) -> bool:
        return self.purchase_price > 0

    @property
    def is_special(self) -> bool:
        return self.cell_type == CellType.SPECIAL

    @property
    def is_tax_office(self) -> bool:
        return self.is_special and self.effect == CellEffect.TAX_OFFICE

    @property
    def owner_id(self) -> Optional[str]:
        return owner_of(self.ownership)

    def is_owned_by(self, player_id: str) -> bool:
        return self.ownership == OwnedBy(player_id)


def cell_from_dict(data: Dict[str, Any]) -> Cell:
    """
    Build a Cell from a board-layout record.

    Accepts both snake_case keys and the camelCase keys used by
    exported layouts (``purchasePrice``, ``ownerId``). An owner id of
    ``0``/``None`` means the cell is state-owned.
    """
    owner = data.get("owner_id", data.get("ownerId"))
    return Cell(
        key=CellKey(int(data["x"]), int(data["y"])),
        ownership=ownership_for(str(owner) if owner not in (None, 0, "0", "") else None),
        purchase_price=int(data.get("purchase_price", data.get("purchasePrice", 0)) or 0),
        land_cost=int(data.get("land_cost", data.get("landCost", 0)) or 0),
        cell_type=CellType(data.get("type", CellType.NORMAL.value)),
        effect=CellEffect(data.get("effect") or CellEffect.NONE.value),
        message=data.get("message", ""),
        effect_value=int(data.get("effect_value", data.get("value", 0)) or 0),
    )


def load_board(path: Union[str, Path]) -> List[Cell]:
    """Load a board layout (JSON list of cell records) from disk."""
    with open(path, encoding="utf-8") as f:
        records = json.load(f)
    return [cell_from_dict(record) for record in records]
