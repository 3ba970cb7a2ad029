"""
Configuration for the navigation subsystem.

A single dataclass collects the tuning knobs that callers would otherwise
thread through every query (expansion budget, per-frame build budget, tie
randomization, wall repair mode, seeding).
"""

from dataclasses import dataclass, asdict
from typing import Optional, Dict, Any
import logging

from .constants import PathfindingDefaults


@dataclass
class NavigationConfig:
    """Main configuration class for GridNavigator."""

    # A* expansion budget per find_path call (None = unlimited)
    expand_limit: Optional[int] = PathfindingDefaults.EXPAND_LIMIT

    # Frontier nodes processed per advance_build call
    nodes_per_frame: int = PathfindingDefaults.NODES_PER_FRAME

    # Coin-flip between equally good improving neighbors in next_step_toward
    randomize_ties: bool = False

    # Relax distances outward after clearing a wall instead of fixing one tile
    propagate_wall_repairs: bool = False

    seed: Optional[int] = None
    enable_logging: bool = False

    def __post_init__(self):
        """Validate navigation configuration."""
        if self.expand_limit is not None and self.expand_limit < 1:
            raise ValueError("expand_limit must be None or at least 1")

        if self.nodes_per_frame < 1:
            raise ValueError("nodes_per_frame must be at least 1")

        if self.enable_logging:
            logging.basicConfig(level=logging.DEBUG)
            logging.info("Navigation logging enabled")

    @classmethod
    def for_exact_repairs(cls, **kwargs) -> "NavigationConfig":
        """Create a configuration whose wall clears keep the flow field exact.

        Clearing a wall then re-lowers every tile whose distance improved,
        at the cost of touching the whole reconnected region.
        """
        return cls(propagate_wall_repairs=True, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "NavigationConfig":
        """Create configuration from a dictionary, ignoring unknown keys."""
        known = {k: v for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)
