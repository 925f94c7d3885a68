"""
Tests for the movement resolver: turning, stepping and clamping.
"""

import random

import pytest

from src.core.game.board import CellKey
from src.core.game.directions import Heading, TurnChoice
from src.core.game.movement import clamp, resolve_move, roll_dice, step_back


def test_single_step_straight_north():
    move = resolve_move(CellKey(2, 2), Heading.NORTH, 1, TurnChoice.STRAIGHT, 3)
    assert move.position == CellKey(2, 3)
    assert move.heading == Heading.NORTH
    assert move.steps == 1


def test_turn_is_applied_before_stepping():
    move = resolve_move(CellKey(2, 2), Heading.NORTH, 1, TurnChoice.RIGHT, 3)
    assert move.heading == Heading.EAST
    assert move.position == CellKey(3, 2)


def test_back_reverses_direction():
    move = resolve_move(CellKey(2, 2), Heading.NORTH, 1, TurnChoice.BACK, 3)
    assert move.heading == Heading.SOUTH
    assert move.position == CellKey(2, 1)


def test_overshoot_stops_on_the_edge():
    move = resolve_move(CellKey(1, 1), Heading.WEST, 2, TurnChoice.STRAIGHT, 3)
    assert move.position == CellKey(1, 1)
    assert move.heading == Heading.WEST


def test_overshoot_clamps_only_the_moving_axis():
    move = resolve_move(CellKey(2, 3), Heading.NORTH, 2, TurnChoice.STRAIGHT, 3)
    assert move.position == CellKey(2, 3)


@pytest.mark.parametrize("board_size", [1, 2, 3, 5])
def test_positions_stay_on_board(board_size):
    for x in range(1, board_size + 1):
        for y in range(1, board_size + 1):
            for heading in Heading:
                for choice in TurnChoice:
                    for steps in (1, 2):
                        move = resolve_move(CellKey(x, y), heading, steps, choice, board_size)
                        assert move.position.in_bounds(board_size)


def test_single_cell_board_never_moves():
    move = resolve_move(CellKey(1, 1), Heading.EAST, 2, TurnChoice.LEFT, 1)
    assert move.position == CellKey(1, 1)
    assert move.heading == Heading.NORTH


def test_clamp():
    assert clamp(0, 3) == 1
    assert clamp(-4, 3) == 1
    assert clamp(2, 3) == 2
    assert clamp(7, 3) == 3


def test_step_back_keeps_heading_direction():
    assert step_back(CellKey(1, 3), Heading.NORTH, 2, 3) == CellKey(1, 1)
    assert step_back(CellKey(2, 2), Heading.EAST, 5, 3) == CellKey(1, 2)


def test_roll_dice_ranges():
    rng = random.Random(7)
    for _ in range(200):
        steps, choice = roll_dice(rng)
        assert steps in (1, 2)
        assert choice in TurnChoice


def test_roll_dice_uses_step_then_direction_die(scripted_rng):
    assert roll_dice(scripted_rng(rolls=[2, 4])) == (2, TurnChoice.BACK)
