"""
Movement resolver: dice roll, turn and clamped step on the grid.

A token that would overshoot the edge stops on the boundary cell; the
board does not wrap.
"""

import random
from dataclasses import dataclass
from typing import Tuple

from src.core.game.board import CellKey
from src.core.game.directions import Heading, TurnChoice, turn, vector

MIN_STEPS = 1
MAX_STEPS = 2


@dataclass(frozen=True)
class Move:
    """Result of resolving one roll."""

    steps: int
    choice: TurnChoice
    heading: Heading
    position: CellKey


def clamp(value: int, board_size: int) -> int:
    return max(1, min(board_size, value))


def clamp_key(x: int, y: int, board_size: int) -> CellKey:
    return CellKey(clamp(x, board_size), clamp(y, board_size))


def roll_dice(rng: random.Random) -> Tuple[int, TurnChoice]:
    """Roll the step die (1-2) and the direction die (1-4)."""
    steps = rng.randint(MIN_STEPS, MAX_STEPS)
    choice = TurnChoice(rng.randint(1, len(TurnChoice)))
    return steps, choice


def resolve_move(
    position: CellKey,
    heading: Heading,
    steps: int,
    choice: TurnChoice,
    board_size: int,
) -> Move:
    """Turn first, then walk ``steps`` cells along the new heading."""
    new_heading = turn(heading, choice)
    dx, dy = vector(new_heading)
    new_position = clamp_key(position.x + dx * steps, position.y + dy * steps, board_size)
    return Move(steps=steps, choice=choice, heading=new_heading, position=new_position)


def step_back(position: CellKey, heading: Heading, distance: int, board_size: int) -> CellKey:
    """Walk ``distance`` cells against ``heading`` without changing it."""
    dx, dy = vector(heading)
    return clamp_key(position.x - dx * distance, position.y - dy * distance, board_size)
