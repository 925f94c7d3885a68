"""
Special-cell effects applied after settlement.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from src.core.game.board import Cell, CellEffect, CellKey
from src.core.game.directions import Heading
from src.core.game.money import EventType, GameEvent
from src.core.game.movement import step_back


@dataclass
class EffectOutcome:
    position: CellKey
    skip_next_turn: bool = False
    event: Optional[GameEvent] = None

    @property
    def events(self) -> List[GameEvent]:
        return [self.event] if self.event else []


def apply_special_effect(
    cell: Cell,
    position: CellKey,
    heading: Heading,
    board_size: int,
    player_id: Optional[str] = None,
) -> EffectOutcome:
    """
    Resolve the effect of a special cell.

    The tax office is settled as a payment and has no effect here.
    ``EXTRA_TURN`` is recorded but grants nothing.
    """
    if not cell.is_special or cell.is_tax_office:
        return EffectOutcome(position=position)

    outcome = EffectOutcome(position=position)
    if cell.effect == CellEffect.GO_BACK:
        outcome.position = step_back(position, heading, cell.effect_value, board_size)
    elif cell.effect == CellEffect.LOSE_TURN:
        outcome.skip_next_turn = True

    outcome.event = GameEvent(
        EventType.SPECIAL_EFFECT,
        player_id,
        {
            "cell": cell.key,
            "effect": cell.effect.value,
            "message": cell.message,
            "position": outcome.position,
        },
    )
    return outcome
