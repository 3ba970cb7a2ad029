"""
Bounded A* search on the grid graph.

Edges all cost one step and the heuristic is Manhattan distance, which is
admissible and consistent for 4-directional movement, so the first time the
goal is popped its path is optimal. An expansion budget caps the work done
per call; when it runs out the search returns the path to the node it was
about to expand instead of the goal.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .constants import DISTANCE_DTYPE, UNREACHABLE, PathfindingDefaults
from .grid_graph import GridGraph
from .priority_frontier import PriorityFrontier

logger = logging.getLogger(__name__)

Tile = Tuple[int, int]

NO_PARENT = -1


@dataclass
class PathResult:
    """Result of a find_path call."""

    path: List[Tile]  # Tiles from start to terminal node, empty if no route
    goal: Tile
    nodes_expanded: int = 0
    reached_goal: bool = False

    @property
    def terminal(self) -> Optional[Tile]:
        return self.path[-1] if self.path else None

    @property
    def is_truncated(self) -> bool:
        """True when the expansion budget ran out before the goal was popped."""
        return bool(self.path) and not self.reached_goal

    def __len__(self) -> int:
        return len(self.path)

    def __iter__(self) -> Iterator[Tile]:
        return iter(self.path)


class AStarSearch:
    """
    Single-pair A* search bound to one GridGraph.

    The per-tile tracking arrays are allocated once and reset on every call,
    so repeated searches on the same level do not reallocate.
    """

    def __init__(self, graph: GridGraph):
        self.graph = graph
        self.frontier = PriorityFrontier()

        self.distance = np.full(graph.size, UNREACHABLE, dtype=DISTANCE_DTYPE)
        self.parents = np.full(graph.size, NO_PARENT, dtype=np.int32)
        self.explored = np.zeros(graph.size, dtype=bool)
        self.open = np.zeros(graph.size, dtype=bool)

    def _reset(self) -> None:
        self.distance.fill(UNREACHABLE)
        self.parents.fill(NO_PARENT)
        self.explored.fill(False)
        self.open.fill(False)
        self.frontier.clear()

    def find_path(
        self,
        start: Tile,
        goal: Tile,
        expand_limit: Optional[int] = PathfindingDefaults.EXPAND_LIMIT,
    ) -> PathResult:
        """
        Find a shortest 4-directional path from start to goal.

        Args:
            start: Starting tile (x, y)
            goal: Goal tile (x, y)
            expand_limit: Maximum nodes to expand, or None for no limit

        Returns:
            PathResult. ``path`` is empty when either endpoint is a wall or the
            goal cannot be reached; it ends short of the goal when the budget
            ran out (``is_truncated``).
        """
        graph = self.graph
        start = (int(start[0]), int(start[1]))
        goal = (int(goal[0]), int(goal[1]))
        start_idx = graph.index_of(*start)
        goal_idx = graph.index_of(*goal)

        if graph.is_wall_index(start_idx) or graph.is_wall_index(goal_idx):
            logger.warning(
                f"find_path called with impassable endpoint: start={start} goal={goal}"
            )
            return PathResult(path=[], goal=goal)

        if start_idx == goal_idx:
            return PathResult(path=[start, goal], goal=goal, reached_goal=True)

        if expand_limit is not None and expand_limit < 1:
            raise ValueError(f"expand_limit must be at least 1, got {expand_limit}")

        self._reset()
        gx, gy = goal
        height = graph.height

        def manhattan(index: int) -> int:
            x, y = divmod(index, height)
            return abs(x - gx) + abs(y - gy)

        self.distance[start_idx] = 0
        self.open[start_idx] = True
        self.frontier.insert(start_idx, manhattan(start_idx))

        expanded = 0
        terminal = None
        reached = False

        while self.frontier:
            current = self.frontier.remove_root()
            if not self.open[current]:
                continue  # stale entry left behind by a re-keyed node
            self.open[current] = False
            self.explored[current] = True

            if current == goal_idx:
                terminal = current
                reached = True
                break

            if expand_limit is not None and expanded >= expand_limit:
                terminal = current
                break

            expanded += 1
            new_distance = int(self.distance[current]) + PathfindingDefaults.STEP_COST

            for neighbor in graph.neighbors(current):
                if self.explored[neighbor]:
                    continue
                if new_distance < self.distance[neighbor]:
                    self.distance[neighbor] = new_distance
                    self.parents[neighbor] = current
                    self.open[neighbor] = True
                    self.frontier.insert(neighbor, new_distance + manhattan(neighbor))

        if terminal is None:
            logger.debug(
                f"No route from {start} to {goal} after expanding {expanded} nodes"
            )
            return PathResult(path=[], goal=goal, nodes_expanded=expanded)

        path = self._reconstruct(terminal)
        if not reached:
            logger.debug(
                f"Expansion budget {expand_limit} exhausted searching {start} -> {goal}, "
                f"returning partial path ending at {path[-1]}"
            )
        return PathResult(
            path=path, goal=goal, nodes_expanded=expanded, reached_goal=reached
        )

    def _reconstruct(self, terminal: int) -> List[Tile]:
        """Walk parents back from terminal, then reverse."""
        path = []
        current = terminal
        while current != NO_PARENT:
            path.append(self.graph.coords_of(current))
            current = int(self.parents[current])
        path.reverse()
        return path
