"""
Compass headings and the turn table used by the movement resolver.
"""

from enum import Enum
from typing import Dict, Tuple


class Heading(str, Enum):
    """Direction a token is facing."""

    NORTH = "NORTH"
    EAST = "EAST"
    SOUTH = "SOUTH"
    WEST = "WEST"


class TurnChoice(Enum):
    """Turn rolled on the direction die (values match the die faces)."""

    RIGHT = 1
    LEFT = 2
    STRAIGHT = 3
    BACK = 4


HEADING_VECTORS: Dict[Heading, Tuple[int, int]] = {
    Heading.NORTH: (0, 1),
    Heading.EAST: (1, 0),
    Heading.SOUTH: (0, -1),
    Heading.WEST: (-1, 0),
}

TURN_TABLE: Dict[Heading, Dict[TurnChoice, Heading]] = {
    Heading.NORTH: {
        TurnChoice.STRAIGHT: Heading.NORTH,
        TurnChoice.RIGHT: Heading.EAST,
        TurnChoice.LEFT: Heading.WEST,
        TurnChoice.BACK: Heading.SOUTH,
    },
    Heading.EAST: {
        TurnChoice.STRAIGHT: Heading.EAST,
        TurnChoice.RIGHT: Heading.SOUTH,
        TurnChoice.LEFT: Heading.NORTH,
        TurnChoice.BACK: Heading.WEST,
    },
    Heading.SOUTH: {
        TurnChoice.STRAIGHT: Heading.SOUTH,
        TurnChoice.RIGHT: Heading.WEST,
        TurnChoice.LEFT: Heading.EAST,
        TurnChoice.BACK: Heading.NORTH,
    },
    Heading.WEST: {
        TurnChoice.STRAIGHT: Heading.WEST,
        TurnChoice.RIGHT: Heading.NORTH,
        TurnChoice.LEFT: Heading.SOUTH,
        TurnChoice.BACK: Heading.EAST,
    },
}


def turn(heading: Heading, choice: TurnChoice) -> Heading:
    """Return the heading after applying a turn choice."""
    return TURN_TABLE[heading][choice]


def vector(heading: Heading) -> Tuple[int, int]:
    """Return the (dx, dy) unit vector for a heading."""
    return HEADING_VECTORS[heading]
