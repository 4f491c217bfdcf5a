"""
Shared navigation types.

This module defines the obstacle grid interface the pathfinder queries,
plus the small value types passed between the pathfinder, the chase
navigator and the world:
- ObstacleGrid: read-only "is this tile blocked?" capability
- Waypoint: one grid cell on a resolved path
- NavigationTarget / NavigationState: what a navigator hands its agent
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple


class Waypoint(NamedTuple):
    """One grid cell on a resolved path."""
    x: int
    y: int


class ObstacleGrid(ABC):
    """
    Read-only obstacle query used by the pathfinder.

    Implementations must give a stable answer for every in-bounds cell
    for the duration of a search, and must not change their extents
    while a pathfinder built on them is alive.
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Number of columns."""
        pass

    @property
    @abstractmethod
    def height(self) -> int:
        """Number of rows."""
        pass

    @abstractmethod
    def is_blocked(self, gx: int, gy: int, layer: Optional[int] = None) -> bool:
        """
        Check whether a tile occupies a cell.

        Args:
            gx, gy: Grid coordinates
            layer: Tile layer to test (implementation default if None)

        Returns:
            True if the cell is blocked on that layer
        """
        pass


@dataclass
class NavigationTarget:
    """Represents a navigation target (waypoint or final goal)."""
    x: float
    y: float
    is_final: bool = False  # True if this is the last waypoint of the path

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def distance_to(self, x: float, y: float) -> float:
        return ((self.x - x) ** 2 + (self.y - y) ** 2) ** 0.5


@dataclass
class NavigationState:
    """Current state of navigation progress."""
    has_path: bool
    current_target: Optional[NavigationTarget]
    waypoints_remaining: int
    total_waypoints: int
    is_complete: bool
    is_stuck: bool  # Last plan found no path
