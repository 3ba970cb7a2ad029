"""
Single-tile passability edits.

Each edit rewires the graph and repairs the active flow field in the same
call, so neither structure is ever left pointing at a tile whose
passability changed underneath it.
"""

import logging
from typing import Iterable, Optional, Tuple

from .flow_field import FlowField
from .grid_graph import GridGraph

logger = logging.getLogger(__name__)


class WallEditor:
    """Applies wall placement/removal to a graph and its flow field."""

    def __init__(self, graph: GridGraph, flow_field: FlowField, propagate: bool = False):
        if flow_field.graph is not graph:
            raise ValueError("flow_field must be built over the same GridGraph")
        self.graph = graph
        self.flow_field = flow_field
        self.propagate = propagate

    def set_wall(
        self, x: int, y: int, is_wall: bool, propagate: Optional[bool] = None
    ) -> int:
        """
        Place (``is_wall=True``) or clear a wall at (x, y).

        Args:
            propagate: Relax improved distances outward after a clear.
                Defaults to the editor's setting. Placing never propagates.

        Returns:
            The tile's distance after the repair.
        """
        if propagate is None:
            propagate = self.propagate

        was_wall = self.graph.is_wall(x, y)
        index = self.graph.set_wall(x, y, is_wall)

        if was_wall == bool(is_wall):
            return int(self.flow_field.distances[index])

        if is_wall:
            self.flow_field.repair_placed(index)
            distance = int(self.flow_field.distances[index])
        else:
            distance = self.flow_field.repair_cleared(index, propagate=propagate)

        logger.debug(
            f"{'Placed' if is_wall else 'Cleared'} wall at ({x}, {y}); "
            f"distance now {distance}"
        )
        return distance

    def set_walls(
        self,
        cells: Iterable[Tuple[int, int]],
        is_wall: bool,
        propagate: Optional[bool] = None,
    ) -> int:
        """Apply the same edit to several tiles. Returns the number of tiles edited."""
        count = 0
        for x, y in cells:
            self.set_wall(x, y, is_wall, propagate=propagate)
            count += 1
        return count
