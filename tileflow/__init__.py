"""
Grid pathfinding: bounded A* search and flow-field steering over one
mutable 4-connected tile grid.
"""

from .astar import AStarSearch, PathResult
from .config import NavigationConfig
from .constants import Direction, PathfindingDefaults, UNREACHABLE
from .errors import InvalidCoordinateError
from .flow_field import FlowField, FlowFieldBuild
from .grid_graph import GridGraph, SearchNode
from .navigator import GridNavigator
from .priority_frontier import PriorityFrontier
from .wall_editor import WallEditor

__all__ = [
    # Graph
    "GridGraph",
    "SearchNode",
    "Direction",
    # Search
    "AStarSearch",
    "PathResult",
    "PriorityFrontier",
    # Flow field
    "FlowField",
    "FlowFieldBuild",
    "WallEditor",
    "UNREACHABLE",
    # Facade
    "GridNavigator",
    "NavigationConfig",
    "PathfindingDefaults",
    "InvalidCoordinateError",
]
