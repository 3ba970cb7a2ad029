"""
Passability graph over a 2D tile grid.

Nodes live in a flat arena addressed by a dense integer key
``index = x * height + y``. Each node owns four neighbor slots
(UP, DOWN, LEFT, RIGHT) holding the neighbor's index or ``NO_NEIGHBOR``.
Edges are always stored in both directions so the graph stays symmetric
through any sequence of wall edits.
"""

import logging
import random
from typing import Iterator, NamedTuple, Optional, Sequence, Tuple, Union

import networkx as nx
import numpy as np

from .constants import (
    Direction,
    DIRECTION_OFFSETS,
    NO_NEIGHBOR,
    NUM_DIRECTIONS,
    OPPOSITE,
)
from .errors import InvalidCoordinateError

logger = logging.getLogger(__name__)

TileArray = Union[np.ndarray, Sequence[Sequence[bool]]]


class SearchNode(NamedTuple):
    """Read-only view of one grid node."""

    x: int
    y: int
    index: int
    neighbors: Tuple[Optional[int], ...]  # indexed by Direction

    def manhattan(self, other: "SearchNode") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)


class GridGraph:
    """
    4-connected passability graph for one world grid.

    Built once per level from a ``tiles[x][y]`` tensor where True marks an
    impassable tile, then mutated in place through ``set_wall``.
    """

    def __init__(self, tiles: TileArray, seed: Optional[int] = None):
        walls = np.asarray(tiles, dtype=bool)
        if walls.ndim != 2:
            raise ValueError(
                f"Passability tensor must be 2-D, got shape {walls.shape}"
            )
        if walls.shape[0] == 0 or walls.shape[1] == 0:
            raise ValueError("Passability tensor must not be empty")

        self.width, self.height = walls.shape
        self.size = self.width * self.height
        self.rng = random.Random(seed)

        # x-major ravel matches index = x * height + y
        self._walls = walls.ravel().copy()
        self._neighbors = self._wire_neighbors(walls)

        logger.debug(
            f"Built {self.width}x{self.height} grid graph with "
            f"{self.edge_count()} edges"
        )

    @classmethod
    def build(cls, tiles: TileArray, seed: Optional[int] = None) -> "GridGraph":
        return cls(tiles, seed=seed)

    def _wire_neighbors(self, walls: np.ndarray) -> np.ndarray:
        """Link every pair of adjacent passable tiles in both directions."""
        w, h = self.width, self.height
        open_tiles = ~walls
        index = np.arange(self.size, dtype=np.int32).reshape(w, h)

        neighbors = np.full((w, h, NUM_DIRECTIONS), NO_NEIGHBOR, dtype=np.int32)

        vertical = open_tiles[:, 1:] & open_tiles[:, :-1]
        horizontal = open_tiles[1:, :] & open_tiles[:-1, :]

        neighbors[:, 1:, Direction.UP] = np.where(vertical, index[:, :-1], NO_NEIGHBOR)
        neighbors[:, :-1, Direction.DOWN] = np.where(vertical, index[:, 1:], NO_NEIGHBOR)
        neighbors[1:, :, Direction.LEFT] = np.where(horizontal, index[:-1, :], NO_NEIGHBOR)
        neighbors[:-1, :, Direction.RIGHT] = np.where(horizontal, index[1:, :], NO_NEIGHBOR)

        return neighbors.reshape(self.size, NUM_DIRECTIONS)

    # =================================================================
    # Coordinates
    # =================================================================

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def index_of(self, x: int, y: int) -> int:
        """Dense key for tile (x, y). Raises InvalidCoordinateError when out of bounds."""
        if not self.in_bounds(x, y):
            raise InvalidCoordinateError(x, y, self.width, self.height)
        return x * self.height + y

    def coords_of(self, index: int) -> Tuple[int, int]:
        if not 0 <= index < self.size:
            raise InvalidCoordinateError(
                index // self.height, index % self.height, self.width, self.height
            )
        return divmod(int(index), self.height)

    # =================================================================
    # Queries
    # =================================================================

    def is_wall(self, x: int, y: int) -> bool:
        return bool(self._walls[self.index_of(x, y)])

    def is_wall_index(self, index: int) -> bool:
        return bool(self._walls[index])

    def neighbor_slots(self, index: int) -> np.ndarray:
        """Raw neighbor slots of a node (NO_NEIGHBOR marks an empty slot)."""
        return self._neighbors[index]

    def neighbor_count(self, x: int, y: int) -> int:
        return int(np.count_nonzero(self._neighbors[self.index_of(x, y)] != NO_NEIGHBOR))

    def node(self, x: int, y: int) -> SearchNode:
        index = self.index_of(x, y)
        slots = tuple(
            None if n == NO_NEIGHBOR else int(n) for n in self._neighbors[index]
        )
        return SearchNode(x, y, index, slots)

    def neighbors(self, index: int, randomize: bool = False) -> Iterator[int]:
        """
        Lazily yield the indices of a node's neighbors.

        Enumeration is ascending by Direction. With ``randomize`` the order is
        reversed half of the time, which keeps many flow-following agents from
        all favouring the same direction on ties.
        """
        slots = self._neighbors[index]
        if randomize and self.rng.random() < 0.5:
            order = range(NUM_DIRECTIONS - 1, -1, -1)
        else:
            order = range(NUM_DIRECTIONS)
        for direction in order:
            neighbor = slots[direction]
            if neighbor != NO_NEIGHBOR:
                yield int(neighbor)

    def neighbor_tiles(
        self, x: int, y: int, randomize: bool = False
    ) -> Iterator[Tuple[int, int]]:
        for neighbor in self.neighbors(self.index_of(x, y), randomize):
            yield self.coords_of(neighbor)

    def edge_count(self) -> int:
        """Number of undirected edges."""
        return int(np.count_nonzero(self._neighbors != NO_NEIGHBOR)) // 2

    def passability(self) -> np.ndarray:
        """Copy of the current wall tensor, indexed [x, y]."""
        return self._walls.reshape(self.width, self.height).copy()

    # =================================================================
    # Edits
    # =================================================================

    def set_wall(self, x: int, y: int, is_wall: bool) -> int:
        """
        Place or clear a wall at (x, y) and rewire its reciprocal edges.

        Placing a wall unlinks the tile from all four sides. Clearing it links
        it to every in-bounds neighbor that is itself passable. Returns the
        tile's index.
        """
        index = self.index_of(x, y)
        self._walls[index] = is_wall

        for direction, (dx, dy) in DIRECTION_OFFSETS.items():
            nx_, ny_ = x + dx, y + dy
            if not self.in_bounds(nx_, ny_):
                continue
            neighbor = nx_ * self.height + ny_
            opposite = OPPOSITE[direction]

            if is_wall or self._walls[neighbor]:
                self._neighbors[index, direction] = NO_NEIGHBOR
                self._neighbors[neighbor, opposite] = NO_NEIGHBOR
            else:
                self._neighbors[index, direction] = neighbor
                self._neighbors[neighbor, opposite] = index

        return index

    # =================================================================
    # Export
    # =================================================================

    def to_networkx(self) -> nx.Graph:
        """Undirected networkx graph of passable tiles labelled by (x, y)."""
        graph = nx.Graph()
        for index in np.flatnonzero(~self._walls):
            graph.add_node(self.coords_of(index))

        for index in range(self.size):
            for neighbor in self.neighbors(index):
                if neighbor > index:
                    graph.add_edge(self.coords_of(index), self.coords_of(neighbor))
        return graph
