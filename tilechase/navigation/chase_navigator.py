"""
Chase navigator: A* path planning plus waypoint following.

Plans a grid path toward a target cell and feeds the resulting waypoints
to its agent one at a time. The plan is redone whenever the agent's own
cell or the target's cell changes, or the map is edited.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .base import NavigationState, NavigationTarget, Waypoint
from .obstacle_map import ObstacleMap
from .pathfinding import CornerRule, DiagonalMovement, GridPathfinder, PathfindingConfig


@dataclass
class ChaseNavigatorConfig:
    """Configuration for a chase navigator."""
    max_search_distance: int = 64
    diagonal_movement: DiagonalMovement = DiagonalMovement.DIAGONAL
    corner_rule: CornerRule = CornerRule.SURROUNDING
    search_layer: int = 1

    def to_pathfinding_config(self) -> PathfindingConfig:
        return PathfindingConfig(
            max_search_distance=self.max_search_distance,
            diagonal_movement=self.diagonal_movement,
            corner_rule=self.corner_rule,
            search_layer=self.search_layer,
        )


class ChaseNavigator:
    """
    Per-agent navigator that walks a planned grid path.

    Architecture:
    1. A* computes a path of grid cells to the target
    2. The first cell is dropped when it is the agent's own cell
    3. Waypoints are handed out one at a time as world-space targets
    4. The agent reports its position; close enough advances to the next

    Each navigator owns its own pathfinder, so agents never share search
    state.
    """

    def __init__(
        self,
        obstacle_map: ObstacleMap,
        config: Optional[ChaseNavigatorConfig] = None,
    ):
        self.config = config or ChaseNavigatorConfig()
        self._obstacle_map = obstacle_map
        self._pathfinder = GridPathfinder(obstacle_map, self.config.to_pathfinding_config())

        # Navigation state
        self._waypoints: List[Waypoint] = []
        self._current_waypoint_idx: int = 0
        self._planned_from: Optional[Tuple[int, int]] = None
        self._planned_to: Optional[Tuple[int, int]] = None
        self._is_complete: bool = False
        self._is_stuck: bool = False

    def set_goal(
        self,
        start_cell: Tuple[int, int],
        goal_cell: Tuple[int, int],
    ) -> bool:
        """
        Plan a path from start_cell to goal_cell.

        Returns:
            True if a path was found, False otherwise
        """
        self.reset()
        self._planned_from = tuple(start_cell)
        self._planned_to = tuple(goal_cell)

        path = self._pathfinder.find_path(
            start_cell[0], start_cell[1],
            goal_cell[0], goal_cell[1],
        )

        if path is None:
            self._is_stuck = True
            return False

        # Skip the agent's own cell
        if path[0] == self._planned_from:
            path = path[1:]

        self._waypoints = path
        self._is_complete = not path
        return True

    def needs_replan(
        self,
        own_cell: Tuple[int, int],
        goal_cell: Tuple[int, int],
    ) -> bool:
        """True if either cell moved since the last plan, or nothing was planned."""
        return (
            self._planned_from is None
            or tuple(own_cell) != self._planned_from
            or tuple(goal_cell) != self._planned_to
        )

    def invalidate(self) -> None:
        """Force a replan on the next check, e.g. after a map edit."""
        self._planned_from = None
        self._planned_to = None

    def get_current_target(self) -> Optional[NavigationTarget]:
        """Get the centre of the current waypoint in world units."""
        if self._is_complete or self._is_stuck:
            return None

        if not self._waypoints or self._current_waypoint_idx >= len(self._waypoints):
            return None

        waypoint = self._waypoints[self._current_waypoint_idx]
        x, y = self._obstacle_map.grid_to_world(waypoint.x, waypoint.y)
        is_final = (self._current_waypoint_idx == len(self._waypoints) - 1)

        return NavigationTarget(x=x, y=y, is_final=is_final)

    def update(self, x: float, y: float, arrival_distance: float) -> None:
        """
        Advance past the current waypoint once the agent is close to it.

        Args:
            x, y: Agent position in world units
            arrival_distance: Distance under which a waypoint counts as reached,
                normally the distance the agent covers in one step
        """
        target = self.get_current_target()
        if target is None:
            return

        if target.distance_to(x, y) < arrival_distance:
            self._current_waypoint_idx += 1
            if self._current_waypoint_idx >= len(self._waypoints):
                self._is_complete = True

    def get_state(self) -> NavigationState:
        """Get current navigation state."""
        return NavigationState(
            has_path=len(self._waypoints) > 0,
            current_target=self.get_current_target(),
            waypoints_remaining=max(0, len(self._waypoints) - self._current_waypoint_idx),
            total_waypoints=len(self._waypoints),
            is_complete=self._is_complete,
            is_stuck=self._is_stuck,
        )

    def reset(self) -> None:
        """Reset navigator to initial state."""
        self._waypoints = []
        self._current_waypoint_idx = 0
        self._planned_from = None
        self._planned_to = None
        self._is_complete = False
        self._is_stuck = False

    @property
    def waypoints(self) -> List[Waypoint]:
        """Get all waypoints (for debugging/visualization)."""
        return self._waypoints.copy()

    @property
    def remaining_waypoints(self) -> List[Waypoint]:
        return self._waypoints[self._current_waypoint_idx:]

    @property
    def pathfinder(self) -> GridPathfinder:
        return self._pathfinder

    def get_path_visualization(self) -> Optional[str]:
        """Get ASCII visualization of the remaining path on the map."""
        if not self._waypoints:
            return None
        return self._obstacle_map.to_ascii(
            self.remaining_waypoints,
            layer=self.config.search_layer,
        )
