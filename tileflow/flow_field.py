"""
Flow field (reverse-BFS distance map) toward one shared goal.

Every reachable tile stores its minimum 4-directional hop count to the goal,
so any number of agents can step toward (or away from) the goal with a
constant-time local lookup instead of running their own search.

Building the map is resumable: ``FlowFieldBuild`` keeps the BFS frontier and
its open/closed partitions as plain fields and processes a bounded number of
frontier nodes per ``advance`` call, letting a large grid rebuild across
several frames of the caller's loop.
"""

import logging
from collections import deque
from typing import Deque, Optional, Tuple

import numpy as np

from .constants import DISTANCE_DTYPE, UNREACHABLE, PathfindingDefaults
from .grid_graph import GridGraph

logger = logging.getLogger(__name__)

Tile = Tuple[int, int]


class FlowFieldBuild:
    """In-progress breadth-first build of a FlowField's distance map."""

    def __init__(self, field: "FlowField", goal_index: int):
        self.field = field
        self.goal_index = goal_index
        self.goal = field.graph.coords_of(goal_index)
        self.expanded = 0

        size = field.graph.size
        self.frontier: Deque[int] = deque()
        self.open = np.zeros(size, dtype=bool)
        self.closed = np.zeros(size, dtype=bool)
        self.restart()

    def restart(self) -> None:
        """Reset the distance map and frontier so the build starts over from its goal."""
        self.frontier.clear()
        self.open.fill(False)
        self.closed.fill(False)
        self.expanded = 0

        distances = self.field.distances
        distances.fill(UNREACHABLE)
        if not self.field.graph.is_wall_index(self.goal_index):
            distances[self.goal_index] = 0
            self.frontier.append(self.goal_index)
            self.open[self.goal_index] = True

    @property
    def superseded(self) -> bool:
        """True once a later rebuild has replaced this one on its field."""
        return self.field.active_build is not self

    @property
    def done(self) -> bool:
        return not self.frontier or self.superseded

    def reopen(self, index: int) -> None:
        """Queue a tile whose distance was lowered outside the build."""
        self.closed[index] = False
        if not self.open[index]:
            self.open[index] = True
            self.frontier.append(index)

    def advance(self, budget: int = PathfindingDefaults.NODES_PER_FRAME) -> bool:
        """
        Expand at most ``budget`` frontier nodes.

        A neighbor's distance is only ever lowered, so tiles repaired by wall
        edits between calls keep their shorter routes.

        Returns:
            True once the frontier is exhausted and the map is complete.
        """
        if budget < 1:
            raise ValueError(f"budget must be at least 1, got {budget}")
        if self.superseded:
            logger.debug(f"Ignoring advance on superseded build toward {self.goal}")
            return True

        graph = self.field.graph
        distances = self.field.distances
        processed = 0

        while self.frontier and processed < budget:
            current = self.frontier.popleft()
            self.open[current] = False
            self.closed[current] = True
            processed += 1

            current_distance = int(distances[current])
            if current_distance == UNREACHABLE:
                continue  # walled off after it was queued

            candidate = current_distance + PathfindingDefaults.STEP_COST
            for neighbor in graph.neighbors(current):
                if candidate >= distances[neighbor]:
                    continue
                distances[neighbor] = candidate
                self.reopen(neighbor)

        self.expanded += processed
        if processed and not self.frontier:
            logger.debug(
                f"Flow field toward {self.goal} complete after expanding "
                f"{self.expanded} nodes"
            )
        return self.done


class FlowField:
    """Distance map toward a single goal over one GridGraph."""

    def __init__(self, graph: GridGraph):
        self.graph = graph
        self.distances = np.full(graph.size, UNREACHABLE, dtype=DISTANCE_DTYPE)
        self.goal: Optional[Tile] = None
        self._goal_index: Optional[int] = None
        self._build: Optional[FlowFieldBuild] = None

    # =================================================================
    # Building
    # =================================================================

    def begin_rebuild(self, goal: Tile) -> FlowFieldBuild:
        """
        Reset the map and start a new build toward ``goal``.

        Any build already in progress is discarded.
        """
        goal_index = self.graph.index_of(*goal)
        if self._build is not None and not self._build.done:
            logger.debug(
                f"Discarding unfinished flow field build toward {self._build.goal}"
            )

        self.goal = self.graph.coords_of(goal_index)
        self._goal_index = goal_index

        if self.graph.is_wall_index(goal_index):
            logger.warning(f"Flow field goal {self.goal} is a wall; no tile can reach it")

        # the build seeds the map: all tiles unreachable, goal at 0
        self._build = FlowFieldBuild(self, goal_index)
        return self._build

    def advance_build(self, budget: int = PathfindingDefaults.NODES_PER_FRAME) -> bool:
        """Advance the active build. Returns True when no build is pending."""
        if self._build is None:
            return True
        return self._build.advance(budget)

    def rebuild(self, goal: Tile) -> FlowFieldBuild:
        """Build the whole map toward ``goal`` in one call."""
        build = self.begin_rebuild(goal)
        while not build.advance(self.graph.size):
            pass
        return build

    @property
    def is_building(self) -> bool:
        return self._build is not None and not self._build.done

    @property
    def active_build(self) -> Optional[FlowFieldBuild]:
        return self._build

    # =================================================================
    # Queries
    # =================================================================

    @property
    def distance_map(self) -> np.ndarray:
        """Read-only (width, height) view of the distances, indexed [x, y]."""
        view = self.distances.reshape(self.graph.width, self.graph.height)
        view.flags.writeable = False
        return view

    def distance(self, x: int, y: int) -> int:
        return int(self.distances[self.graph.index_of(x, y)])

    def is_reachable(self, x: int, y: int) -> bool:
        return self.distance(x, y) != UNREACHABLE

    def next_step_toward(
        self, x: int, y: int, randomize_ties: bool = False
    ) -> Optional[Tile]:
        """
        Neighbor of (x, y) with the smallest distance below its own.

        With ``randomize_ties`` a coin flip picks among improving neighbors
        that share the minimum. Returns None at the goal, on an unreachable
        tile, or when no neighbor improves.
        """
        index = self.graph.index_of(x, y)
        best = int(self.distances[index])
        if best == 0 or best == UNREACHABLE:
            return None

        rng = self.graph.rng
        target = None
        for neighbor in self.graph.neighbors(index, randomize=True):
            neighbor_distance = int(self.distances[neighbor])
            if neighbor_distance < best:
                best = neighbor_distance
                target = neighbor
            elif (
                randomize_ties
                and target is not None
                and neighbor_distance == best
                and rng.random() < 0.5
            ):
                target = neighbor

        return self.graph.coords_of(target) if target is not None else None

    def next_step_away(self, x: int, y: int) -> Optional[Tile]:
        """
        Neighbor of (x, y) that is farther from the goal, for fleeing.

        The first candidate found is kept unless a later one wins a coin flip.
        Unreachable neighbors are never chosen.
        """
        index = self.graph.index_of(x, y)
        current = int(self.distances[index])
        if current == UNREACHABLE:
            return None

        rng = self.graph.rng
        target = None
        for neighbor in self.graph.neighbors(index, randomize=True):
            neighbor_distance = int(self.distances[neighbor])
            if not current < neighbor_distance < UNREACHABLE:
                continue
            if target is None or rng.random() < 0.5:
                target = neighbor

        return self.graph.coords_of(target) if target is not None else None

    # =================================================================
    # Repair after wall edits
    # =================================================================

    def repair_placed(self, index: int) -> None:
        """
        Mark a just-walled tile unreachable.

        If a build is running and had already reached the tile, distances
        routed through it may be too small, so the build restarts from its
        goal. A tile the build has not reached yet cannot have fed any
        distance and needs no restart.
        """
        was_reached = self.distances[index] != UNREACHABLE
        self.distances[index] = UNREACHABLE
        if self.is_building and was_reached:
            logger.debug(
                f"Wall placed at {self.graph.coords_of(index)} behind the build "
                f"wavefront; restarting build toward {self.goal}"
            )
            self._build.restart()

    def repair_cleared(self, index: int, propagate: bool = False) -> int:
        """
        Recompute a just-cleared tile from its neighbors.

        The tile gets ``1 + min(neighbor distances)``, or stays unreachable
        when every neighbor is. Without ``propagate`` only this tile changes,
        so a reconnected region keeps its old (too large) distances until the
        next full rebuild. With ``propagate`` the improvement is relaxed
        outward until no neighbor gets shorter.

        While a build is running the repaired tile is queued on its frontier,
        so the finished map is exact in either mode.

        Returns:
            The tile's new distance.
        """
        if index == self._goal_index:
            self.distances[index] = 0
        else:
            best = min(
                (int(self.distances[n]) for n in self.graph.neighbors(index)),
                default=UNREACHABLE,
            )
            self.distances[index] = (
                best + PathfindingDefaults.STEP_COST if best != UNREACHABLE else UNREACHABLE
            )

        new_distance = int(self.distances[index])
        if new_distance != UNREACHABLE and self.is_building:
            self._build.reopen(index)
        if propagate and new_distance != UNREACHABLE:
            lowered = self._relax_from(index)
            logger.debug(
                f"Relaxed {lowered} tiles after clearing {self.graph.coords_of(index)}"
            )
        return new_distance

    def _relax_from(self, source: int) -> int:
        """Lower neighbor distances outward from source. Returns tiles lowered."""
        build = self._build if self.is_building else None
        worklist: Deque[int] = deque([source])
        lowered = 0
        while worklist:
            current = worklist.popleft()
            candidate = int(self.distances[current]) + PathfindingDefaults.STEP_COST
            for neighbor in self.graph.neighbors(current):
                if candidate < self.distances[neighbor]:
                    self.distances[neighbor] = candidate
                    worklist.append(neighbor)
                    lowered += 1
                    if build is not None:
                        build.reopen(neighbor)
        return lowered
