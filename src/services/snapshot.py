"""
Public snapshot serialization of the game world.

Produces a UI-friendly view of players, the board and the bank.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from src.core.game.board import Cell, CellKey
from src.core.game.player import PlayerState


def serialize_snapshot(
    players: Dict[str, PlayerState],
    cells: Dict[CellKey, Cell],
    bank_balance: Optional[int],
) -> Dict[str, Any]:
    """Serialize players, cells and the bank into a public, stable JSON dict.

    The snapshot includes:
    - players with position, heading, wallet, turn count and owned parcels
    - every board cell with owner, prices and effect
    - the bank balance
    """
    owned: Dict[str, List[Dict[str, int]]] = {}
    board: List[Dict[str, Any]] = []
    for key, cell in sorted(cells.items()):
        if cell.owner_id is not None:
            owned.setdefault(cell.owner_id, []).append({"x": key.x, "y": key.y})
        board.append(
            {
                "x": key.x,
                "y": key.y,
                "owner_id": cell.owner_id,
                "purchase_price": cell.purchase_price,
                "land_cost": cell.land_cost,
                "type": cell.cell_type.value,
                "effect": cell.effect.value,
                "message": cell.message,
            }
        )

    player_list: List[Dict[str, Any]] = []
    for pid, p in sorted(players.items()):
        player_list.append(
            {
                "player_id": pid,
                "name": p.name,
                "position": {"x": p.position.x, "y": p.position.y},
                "heading": p.heading.value,
                "wallet": p.wallet,
                "turns_played": p.turns_played,
                "skip_next_turn": p.skip_next_turn,
                "status": p.status.value,
                "parcels": owned.get(pid, []),
            }
        )

    return {
        "players": player_list,
        "board": board,
        "bank": {"balance": bank_balance},
    }
