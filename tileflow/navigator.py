"""
Navigation handle for one world grid.

``GridNavigator`` owns the passability graph, the A* search scratch state,
the flow field and the wall editor for a single level. Callers construct one
per level and pass it to whatever needs path or flow queries.

Example:
    nav = GridNavigator(tiles, NavigationConfig(seed=7))
    nav.set_goal((10, 4))
    while not nav.advance_build():
        ...  # one call per frame
    step = nav.next_step_toward(2, 3)
"""

import logging
from typing import Optional, Tuple

import numpy as np

from .astar import AStarSearch, PathResult
from .config import NavigationConfig
from .flow_field import FlowField, FlowFieldBuild
from .grid_graph import GridGraph, TileArray
from .wall_editor import WallEditor

logger = logging.getLogger(__name__)

Tile = Tuple[int, int]

_UNSET = object()


class GridNavigator:
    """A* paths and flow-field steering over one mutable tile grid."""

    def __init__(self, tiles: TileArray, config: Optional[NavigationConfig] = None):
        self.config = config or NavigationConfig()
        self.graph = GridGraph(tiles, seed=self.config.seed)
        self.search = AStarSearch(self.graph)
        self.flow_field = FlowField(self.graph)
        self.wall_editor = WallEditor(
            self.graph, self.flow_field, propagate=self.config.propagate_wall_repairs
        )
        logger.debug(
            f"GridNavigator ready for {self.graph.width}x{self.graph.height} grid"
        )

    @property
    def width(self) -> int:
        return self.graph.width

    @property
    def height(self) -> int:
        return self.graph.height

    # =================================================================
    # A*
    # =================================================================

    def find_path(self, start: Tile, goal: Tile, expand_limit=_UNSET) -> PathResult:
        """Bounded A* from start to goal; expand_limit defaults to the config."""
        if expand_limit is _UNSET:
            expand_limit = self.config.expand_limit
        return self.search.find_path(start, goal, expand_limit)

    # =================================================================
    # Flow field
    # =================================================================

    def set_goal(self, goal: Tile) -> FlowFieldBuild:
        """Start rebuilding the flow field toward goal; drive it with advance_build."""
        return self.flow_field.begin_rebuild(goal)

    def advance_build(self, budget: Optional[int] = None) -> bool:
        if budget is None:
            budget = self.config.nodes_per_frame
        return self.flow_field.advance_build(budget)

    def rebuild_flow_field(self, goal: Tile) -> FlowFieldBuild:
        """Rebuild the flow field toward goal to completion."""
        return self.flow_field.rebuild(goal)

    @property
    def goal(self) -> Optional[Tile]:
        return self.flow_field.goal

    @property
    def is_building(self) -> bool:
        return self.flow_field.is_building

    @property
    def distance_map(self) -> np.ndarray:
        return self.flow_field.distance_map

    def flow_distance(self, x: int, y: int) -> int:
        return self.flow_field.distance(x, y)

    def next_step_toward(
        self, x: int, y: int, randomize_ties: Optional[bool] = None
    ) -> Optional[Tile]:
        if randomize_ties is None:
            randomize_ties = self.config.randomize_ties
        return self.flow_field.next_step_toward(x, y, randomize_ties)

    def next_step_away(self, x: int, y: int) -> Optional[Tile]:
        return self.flow_field.next_step_away(x, y)

    # =================================================================
    # Edits
    # =================================================================

    def set_wall(
        self, x: int, y: int, is_wall: bool, propagate: Optional[bool] = None
    ) -> int:
        return self.wall_editor.set_wall(x, y, is_wall, propagate)

    def is_wall(self, x: int, y: int) -> bool:
        return self.graph.is_wall(x, y)
