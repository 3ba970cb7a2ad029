"""
Constants shared by the grid graph, search and flow field components.

This module keeps the direction layout, array sentinels and default
tuning values in one place so that no component hard-codes them.
"""

from enum import IntEnum

import numpy as np


class Direction(IntEnum):
    """Neighbor slots of a grid node, in ascending enumeration order."""

    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3


# Reciprocal slot for each direction (UP <-> DOWN, LEFT <-> RIGHT)
OPPOSITE = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}

# (dx, dy) offset per direction; y grows downward like the tile tensor
DIRECTION_OFFSETS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

NUM_DIRECTIONS = len(Direction)

# Empty neighbor slot in the flat neighbor array
NO_NEIGHBOR = -1

# Distance map dtype and "unreachable" sentinel
DISTANCE_DTYPE = np.int32
UNREACHABLE = int(np.iinfo(DISTANCE_DTYPE).max)


class PathfindingDefaults:
    """Default values for navigation algorithms."""

    # Maximum nodes A* expands before returning a best-effort path
    EXPAND_LIMIT: int = 200

    # Frontier nodes processed per flow field build step
    NODES_PER_FRAME: int = 10

    # Edge cost for every 4-directional move
    STEP_COST: int = 1
