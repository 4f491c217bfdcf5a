"""
Navigation module: grid pathfinding and path following.

- ObstacleMap: layered tile map the pathfinder searches
- GridPathfinder: A* search returning grid waypoints
- ChaseNavigator: plans toward a moving target and walks the path

Example usage:
    from tilechase.navigation import ObstacleMap, GridPathfinder, PathfindingConfig

    obstacle_map = ObstacleMap.from_ascii([
        ".....",
        "..#..",
        ".....",
    ])
    pathfinder = GridPathfinder(obstacle_map, PathfindingConfig())
    path = pathfinder.find_path(0, 1, 4, 1)  # [Waypoint(x=0, y=1), ...] or None
"""

# Base types and the obstacle grid interface
from .base import (
    ObstacleGrid,
    Waypoint,
    NavigationTarget,
    NavigationState,
)

# Tile map
from .obstacle_map import (
    ObstacleMap,
    ObstacleMapConfig,
)

# A* pathfinding
from .pathfinding import (
    GridPathfinder,
    PathfindingConfig,
    DiagonalMovement,
    CornerRule,
    SearchNode,
    SearchStats,
    StopReason,
    OpenSet,
    path_cost,
    ORTHOGONAL_COST,
    DIAGONAL_COST,
)

# Path following
from .chase_navigator import (
    ChaseNavigator,
    ChaseNavigatorConfig,
)

__all__ = [
    # Base
    "ObstacleGrid",
    "Waypoint",
    "NavigationTarget",
    "NavigationState",
    # Obstacle map
    "ObstacleMap",
    "ObstacleMapConfig",
    # Pathfinding
    "GridPathfinder",
    "PathfindingConfig",
    "DiagonalMovement",
    "CornerRule",
    "SearchNode",
    "SearchStats",
    "StopReason",
    "OpenSet",
    "path_cost",
    "ORTHOGONAL_COST",
    "DIAGONAL_COST",
    # Navigator
    "ChaseNavigator",
    "ChaseNavigatorConfig",
]
