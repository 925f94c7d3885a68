"""
Tests for special-cell effects.
"""

from src.core.game.board import Cell, CellEffect, CellKey, CellType
from src.core.game.directions import Heading
from src.core.game.effects import apply_special_effect
from src.core.game.money import EventType


def _special(effect, value=0, message="Something happens."):
    return Cell(
        key=CellKey(2, 3),
        cell_type=CellType.SPECIAL,
        effect=effect,
        effect_value=value,
        message=message,
    )


def test_normal_cell_has_no_effect():
    outcome = apply_special_effect(Cell(key=CellKey(2, 3)), CellKey(2, 3), Heading.NORTH, 3)
    assert outcome.position == CellKey(2, 3)
    assert not outcome.skip_next_turn
    assert outcome.events == []


def test_go_back_moves_against_heading():
    outcome = apply_special_effect(_special(CellEffect.GO_BACK, 2), CellKey(2, 3), Heading.NORTH, 3, "alice")
    assert outcome.position == CellKey(2, 1)
    assert outcome.event.event_type == EventType.SPECIAL_EFFECT
    assert outcome.event.details["position"] == CellKey(2, 1)
    assert outcome.event.player_id == "alice"


def test_go_back_is_clamped():
    outcome = apply_special_effect(_special(CellEffect.GO_BACK, 10), CellKey(2, 3), Heading.NORTH, 3)
    assert outcome.position == CellKey(2, 1)


def test_lose_turn_sets_skip_flag():
    outcome = apply_special_effect(_special(CellEffect.LOSE_TURN), CellKey(2, 3), Heading.NORTH, 3)
    assert outcome.skip_next_turn
    assert outcome.position == CellKey(2, 3)


def test_extra_turn_is_recorded_but_grants_nothing():
    outcome = apply_special_effect(_special(CellEffect.EXTRA_TURN), CellKey(2, 3), Heading.NORTH, 3)
    assert outcome.position == CellKey(2, 3)
    assert not outcome.skip_next_turn
    assert outcome.event.details["effect"] == "extra_turn"


def test_tax_office_is_not_an_effect():
    outcome = apply_special_effect(_special(CellEffect.TAX_OFFICE), CellKey(2, 3), Heading.NORTH, 3)
    assert outcome.events == []
